"""Map configuration with optional JSON overrides."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .geo import LatLng
from .markers import DEFAULT_MARKER_LABEL
from .storage import MARKERS_KEY
from .view import DETAIL_TILES, STANDARD_TILES, TileSource

TOKYO_STATION: LatLng = (35.681236, 139.767125)  # 東京駅


@dataclass
class MapConfig:
    center: List[float] = field(default_factory=lambda: list(TOKYO_STATION))
    zoom: int = 13
    located_zoom: int = 15
    storage_key: str = MARKERS_KEY
    marker_label: str = DEFAULT_MARKER_LABEL
    located_label: str = "現在地"
    route_color: str = "blue"
    route_weight: int = 3
    base_tiles: TileSource = STANDARD_TILES
    detail_tiles: TileSource = DETAIL_TILES
    minimap_size: int = 150
    browser_geolocation: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.base_tiles, dict):
            self.base_tiles = TileSource(**self.base_tiles)
        if isinstance(self.detail_tiles, dict):
            self.detail_tiles = TileSource(**self.detail_tiles)
        if len(self.center) != 2:
            raise ValueError(f"center must be [lat, lon], got {self.center!r}")
        self.center = [float(self.center[0]), float(self.center[1])]

    @property
    def default_center(self) -> LatLng:
        return (self.center[0], self.center[1])


def load_json(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_config(path: Optional[str] = None, **overrides: Any) -> MapConfig:
    """Read a JSON config file, then apply non-None keyword overrides."""
    cfg = load_json(path)
    for k, v in overrides.items():
        if v is not None:
            cfg[k] = v
    return MapConfig(**cfg)
