"""Great-circle distance helpers and the route engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

LatLng = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0
ROUTE_LABEL = "経路距離"


# ----------------------------
# Distance helpers
# ----------------------------

def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance in kilometres between two (lat, lon) points."""
    lat1, lon1 = a
    lat2, lon2 = b
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dp = math.radians(lat2 - lat1)
    dl = math.radians(lon2 - lon1)
    h = math.sin(dp / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def segment_lengths_km(points: Sequence[LatLng]) -> np.ndarray:
    """Haversine length of each consecutive segment, in order.

    Returns an empty array for fewer than two points.
    """
    if len(points) < 2:
        return np.zeros(0, dtype=np.float64)
    arr = np.radians(np.asarray(points, dtype=np.float64))
    lat = arr[:, 0]
    lon = arr[:, 1]
    dp = np.diff(lat)
    dl = np.diff(lon)
    h = np.sin(dp / 2.0) ** 2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(dl / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))


def route_length_km(points: Sequence[LatLng]) -> float:
    return float(np.sum(segment_lengths_km(points)))


def format_route_distance(total_km: Optional[float]) -> str:
    if total_km is None:
        return ""
    return f"{ROUTE_LABEL}: {total_km:.2f} km"


def validate_latlng(lat: float, lon: float) -> LatLng:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"coordinate must be finite: ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"longitude out of range: {lon}")
    return float(lat), float(lon)


# ----------------------------
# Route engine
# ----------------------------

@dataclass(frozen=True)
class Route:
    points: Tuple[LatLng, ...]
    length_km: float

    @property
    def label(self) -> str:
        return format_route_distance(self.length_km)


class RouteEngine:
    """Keeps the single current route derived from the marker order.

    Each update replaces the previous route; with fewer than two points
    there is no route and the distance text is empty.
    """

    def __init__(self) -> None:
        self.current: Optional[Route] = None

    def update(self, points: Sequence[LatLng]) -> Optional[Route]:
        if len(points) < 2:
            self.current = None
            return None
        pts: List[LatLng] = [(float(lat), float(lon)) for lat, lon in points]
        self.current = Route(points=tuple(pts), length_km=route_length_km(pts))
        return self.current

    @property
    def distance_text(self) -> str:
        return self.current.label if self.current is not None else ""
