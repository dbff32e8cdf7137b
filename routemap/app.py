"""Application state and the event handlers that mutate it.

Every handler runs to completion before the next event is handled, so the
marker sequence never sees overlapping mutations.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import MapConfig
from .geo import LatLng, Route, RouteEngine
from .geolocation import Locator, request_position
from .markers import MarkerHandle, MarkerStore
from .overlays import DEFAULT_ROADS, DEFAULT_STATIONS, RoadSegment, Station
from .storage import KeyValueStorage, PersistenceBridge
from .view import TileSource, ViewMode

logger = logging.getLogger(__name__)


class AppState:
    def __init__(
        self,
        storage: KeyValueStorage,
        config: Optional[MapConfig] = None,
        roads: Optional[Sequence[RoadSegment]] = None,
        stations: Optional[Sequence[Station]] = None,
    ) -> None:
        self.config = config or MapConfig()
        self.store = MarkerStore()
        self.route_engine = RouteEngine()
        self.persistence = PersistenceBridge(storage, key=self.config.storage_key)
        self.view = ViewMode(self.config.base_tiles, self.config.detail_tiles)
        self.center: LatLng = self.config.default_center
        self.zoom: int = self.config.zoom
        self.roads: List[RoadSegment] = list(DEFAULT_ROADS if roads is None else roads)
        self.stations: List[Station] = list(DEFAULT_STATIONS if stations is None else stations)
        self.located = False

    # --- derived ---

    @property
    def route(self) -> Optional[Route]:
        return self.route_engine.current

    @property
    def distance_text(self) -> str:
        return self.route_engine.distance_text

    # --- startup ---

    def start(self, locator: Optional[Locator] = None) -> None:
        """Restore saved markers, then request the position once.

        The position marker, when one arrives, is appended after the restored ones.
        """
        self.load_saved_markers()
        request_position(locator, self.on_geolocation_success, self.on_geolocation_error)

    def load_saved_markers(self) -> List[MarkerHandle]:
        return [self.add_marker(latlng, draggable=True) for latlng in self.persistence.load()]

    def on_geolocation_success(self, latlng: LatLng) -> MarkerHandle:
        self.center = (float(latlng[0]), float(latlng[1]))
        self.zoom = self.config.located_zoom
        self.located = True
        return self.add_marker(latlng, draggable=False, label=self.config.located_label)

    def on_geolocation_error(self, message: str) -> None:
        logger.warning("現在地取得失敗: %s", message)

    # --- marker events ---

    def add_marker(self, latlng: LatLng, draggable: bool = True, label: Optional[str] = None) -> MarkerHandle:
        handle = self.store.add(latlng, draggable=draggable, label=label or self.config.marker_label)
        self._refresh()
        return handle

    def on_map_click(self, latlng: LatLng) -> MarkerHandle:
        return self.add_marker(latlng)

    def on_drag_end(self, handle: MarkerHandle, latlng: LatLng) -> None:
        self.store.move(handle, latlng)
        self._refresh()

    def on_context_menu(self, handle: MarkerHandle) -> None:
        self.store.remove(handle)
        self._refresh()

    def clear_markers(self) -> None:
        for handle in self.store.handles():
            self.store.remove(handle)
        self._refresh()

    def on_toggle_detail_map(self) -> TileSource:
        return self.view.toggle()

    def _refresh(self) -> None:
        coords = self.store.coordinates()
        self.route_engine.update(coords)
        self.persistence.save(coords)
