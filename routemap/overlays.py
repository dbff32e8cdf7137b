"""Static road and station overlays.

Both datasets are resolved to display colours once and drawn once; nothing
here is re-evaluated after startup.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import folium
import pandas as pd
from shapely.geometry import shape

from .geo import LatLng

logger = logging.getLogger(__name__)

# 種別ごとの色
ROAD_COLORS: Dict[str, str] = {
    "national": "brown",    # 国道
    "prefecture": "green",  # 県道
    "toll": "purple",       # 有料道路
    "private": "gray",      # 私有地
    "normal": "black",      # 普通の道
}

# 交通状況による色 (normal は種別色のまま)
TRAFFIC_COLORS: Dict[str, Optional[str]] = {
    "normal": None,
    "congestion": "red",
    "restriction": "orange",
    "caution": "yellow",
}

DEFAULT_ROAD_COLOR = "black"

PUBLIC_RAIL = "japan_rail"
PRIVATE_RAIL = "private_rail"
PUBLIC_RAIL_COLOR = "yellow"
PRIVATE_RAIL_COLOR = "blue"


@dataclass(frozen=True)
class RoadSegment:
    coords: Tuple[LatLng, ...]
    category: str = "normal"
    traffic: Optional[str] = None


@dataclass(frozen=True)
class Station:
    lat: float
    lon: float
    category: str
    name: str

    @property
    def latlng(self) -> LatLng:
        return (self.lat, self.lon)


DEFAULT_ROADS: Tuple[RoadSegment, ...] = (
    RoadSegment(
        coords=((35.681, 139.767), (35.682, 139.770), (35.683, 139.775)),
        category="national",
        traffic="normal",
    ),
    RoadSegment(
        coords=((35.684, 139.765), (35.685, 139.769)),
        category="prefecture",
        traffic="congestion",
    ),
)

DEFAULT_STATIONS: Tuple[Station, ...] = (
    Station(lat=35.681, lon=139.767, category=PUBLIC_RAIL, name="東京駅"),
    Station(lat=35.685, lon=139.770, category=PRIVATE_RAIL, name="私鉄駅1"),
)


# ----------------------------
# Colour lookup
# ----------------------------

def road_color(road: RoadSegment) -> str:
    """Traffic colour wins, then the category colour, then the default."""
    traffic_color = TRAFFIC_COLORS.get(road.traffic) if road.traffic else None
    if traffic_color:
        return traffic_color
    return ROAD_COLORS.get(road.category, DEFAULT_ROAD_COLOR)


def station_color(station: Station) -> str:
    return PUBLIC_RAIL_COLOR if station.category == PUBLIC_RAIL else PRIVATE_RAIL_COLOR


# ----------------------------
# Loading
# ----------------------------

def load_roads_geojson(path: str) -> List[RoadSegment]:
    """Load road segments from a GeoJSON FeatureCollection.

    MultiLineStrings are split into one segment per part; other geometry
    types and lines with fewer than two points are skipped.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    roads: List[RoadSegment] = []
    for feat in data.get("features", []):
        geom = feat.get("geometry")
        if not geom:
            continue
        props = feat.get("properties", {}) or {}
        category = str(props.get("type") or props.get("category") or "normal").strip()
        traffic = props.get("traffic")
        traffic = str(traffic).strip() if traffic else None

        sh = shape(geom)
        if sh.geom_type == "LineString":
            lines = [sh]
        elif sh.geom_type == "MultiLineString":
            lines = list(sh.geoms)
        else:
            continue

        for ls in lines:
            coords = list(ls.coords)
            if len(coords) < 2:
                continue
            roads.append(
                RoadSegment(
                    coords=tuple((float(y), float(x)) for x, y, *_ in coords),
                    category=category,
                    traffic=traffic,
                )
            )

    logger.info("Loaded %d road segments from %s", len(roads), path)
    return roads


def load_stations_csv(path: str, default_category: str = PRIVATE_RAIL) -> List[Station]:
    """Load stations from a CSV with lat/lon (or GTFS stop_lat/stop_lon) columns."""
    df = pd.read_csv(path, dtype=str)

    lat_col = "lat" if "lat" in df.columns else "stop_lat"
    lon_col = "lon" if "lon" in df.columns else "stop_lon"
    if lat_col not in df.columns or lon_col not in df.columns:
        raise ValueError(f"{path}: expected lat/lon or stop_lat/stop_lon columns")
    name_col = "name" if "name" in df.columns else "stop_name"
    cat_col = "type" if "type" in df.columns else "category"

    df["_lat"] = pd.to_numeric(df[lat_col], errors="coerce")
    df["_lon"] = pd.to_numeric(df[lon_col], errors="coerce")
    df = df.dropna(subset=["_lat", "_lon"])

    stations: List[Station] = []
    for _, row in df.iterrows():
        name = str(row.get(name_col, "") or "").strip()
        category = str(row.get(cat_col, "") or "").strip()
        if not category or category.lower() == "nan":
            category = default_category
        if name.lower() == "nan":
            name = ""
        stations.append(Station(lat=float(row["_lat"]), lon=float(row["_lon"]), category=category, name=name))

    logger.info("Loaded %d stations from %s", len(stations), path)
    return stations


# ----------------------------
# Drawing
# ----------------------------

def draw_roads(m: folium.Map, roads: List[RoadSegment]) -> folium.FeatureGroup:
    fg = folium.FeatureGroup(name="道路", show=True)
    for road in roads:
        folium.PolyLine(
            locations=[list(p) for p in road.coords],
            color=road_color(road),
            weight=4,
            opacity=0.8,
        ).add_to(fg)
    fg.add_to(m)
    return fg


def draw_stations(m: folium.Map, stations: List[Station]) -> folium.FeatureGroup:
    fg = folium.FeatureGroup(name="駅", show=True)
    for st in stations:
        color = station_color(st)
        folium.CircleMarker(
            location=list(st.latlng),
            radius=7,
            color=color,
            weight=1,
            opacity=1,
            fill=True,
            fill_color=color,
            fill_opacity=0.8,
            tooltip=folium.Tooltip(st.name, sticky=False, permanent=False, direction="top") if st.name else None,
        ).add_to(fg)
    fg.add_to(m)
    return fg
