"""Ordered marker store with stable handles."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Tuple

from .geo import LatLng

DEFAULT_MARKER_LABEL = "マーカー"

MarkerHandle = int


@dataclass(frozen=True)
class Marker:
    lat: float
    lon: float
    draggable: bool = True
    label: str = DEFAULT_MARKER_LABEL

    @property
    def latlng(self) -> LatLng:
        return (self.lat, self.lon)


class MarkerStore:
    """Markers in insertion order, addressed by handles that are never reused.

    Removing one marker leaves every other handle valid.
    """

    def __init__(self) -> None:
        self._markers: Dict[MarkerHandle, Marker] = {}
        self._order: List[MarkerHandle] = []
        self._next_handle: MarkerHandle = 1

    def add(
        self,
        latlng: LatLng,
        draggable: bool = True,
        label: str = DEFAULT_MARKER_LABEL,
    ) -> MarkerHandle:
        lat, lon = latlng
        handle = self._next_handle
        self._next_handle += 1
        self._markers[handle] = Marker(lat=float(lat), lon=float(lon), draggable=draggable, label=label)
        self._order.append(handle)
        return handle

    def remove(self, handle: MarkerHandle) -> Marker:
        marker = self._markers.pop(handle)
        self._order.remove(handle)
        return marker

    def move(self, handle: MarkerHandle, latlng: LatLng) -> Marker:
        lat, lon = latlng
        moved = replace(self._markers[handle], lat=float(lat), lon=float(lon))
        self._markers[handle] = moved
        return moved

    def get(self, handle: MarkerHandle) -> Marker:
        return self._markers[handle]

    def handles(self) -> List[MarkerHandle]:
        return list(self._order)

    def coordinates(self) -> List[LatLng]:
        return [self._markers[h].latlng for h in self._order]

    def items(self) -> List[Tuple[MarkerHandle, Marker]]:
        return [(h, self._markers[h]) for h in self._order]

    def __contains__(self, handle: object) -> bool:
        return handle in self._markers

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Marker]:
        return (self._markers[h] for h in self._order)
