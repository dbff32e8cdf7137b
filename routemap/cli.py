#!/usr/bin/env python3
"""routemap command line.

Build the interactive map page, or edit the saved marker route headlessly:

  routemap build --out map.html --position 35.6812 139.7671
  routemap add 35.690 139.780
  routemap list
  routemap remove 1
  routemap clear

Markers live in a JSON storage file (``--storage``) under the same
``markers`` key the page uses in the browser's localStorage.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from . import logging_config
from .app import AppState
from .config import MapConfig, load_config
from .geo import LatLng, validate_latlng
from .geolocation import fixed_locator
from .overlays import load_roads_geojson, load_stations_csv
from .page import write_map
from .storage import JsonFileStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE = "routemap_storage.json"


def parse_latlng(vals: List[float]) -> LatLng:
    try:
        return validate_latlng(float(vals[0]), float(vals[1]))
    except ValueError as e:
        raise SystemExit(f"Invalid coordinate: {e}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="routemap", description="Interactive marker/route map builder")
    ap.add_argument("--config", default=None, help="JSON file with MapConfig fields")
    ap.add_argument("--storage", default=DEFAULT_STORAGE, help="JSON storage file holding the saved markers")
    ap.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")

    sub = ap.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Write the interactive HTML map")
    b.add_argument("--out", default="map.html", help="Output HTML filename")
    b.add_argument("--position", nargs=2, type=float, metavar=("LAT", "LON"), default=None,
                   help="Current position: centres the view and drops a fixed marker")
    b.add_argument("--roads", default=None, help="GeoJSON of road lines (properties: type, traffic)")
    b.add_argument("--stations", default=None, help="CSV of stations (lat, lon, name, type)")
    b.add_argument("--no-browser-geolocation", action="store_true",
                   help="Do not ask the browser for the current position")

    a = sub.add_parser("add", help="Append a marker to the saved route")
    a.add_argument("lat", type=float)
    a.add_argument("lon", type=float)
    a.add_argument("--fixed", action="store_true", help="Non-draggable marker")
    a.add_argument("--label", default=None)

    r = sub.add_parser("remove", help="Remove a marker by its 1-based position in the route")
    r.add_argument("index", type=int)

    sub.add_parser("list", help="Print saved markers and the route distance")
    sub.add_parser("clear", help="Remove all saved markers")
    return ap


def print_route(state: AppState) -> None:
    for i, (_, mk) in enumerate(state.store.items(), start=1):
        flag = "" if mk.draggable else " (fixed)"
        print(f"{i:>3}  {mk.lat:.6f},{mk.lon:.6f}  {mk.label}{flag}")
    print(state.distance_text or f"Markers: {len(state.store)} (no route)")


def cmd_build(args: argparse.Namespace, config: MapConfig, storage: JsonFileStorage) -> None:
    if args.no_browser_geolocation:
        config.browser_geolocation = False
    roads = load_roads_geojson(args.roads) if args.roads else None
    stations = load_stations_csv(args.stations) if args.stations else None

    state = AppState(storage, config=config, roads=roads, stations=stations)
    locator = fixed_locator(parse_latlng(args.position)) if args.position else None
    state.start(locator)

    write_map(state, args.out)
    print(f"Wrote: {args.out}")
    print(
        f"Markers: {len(state.store):,} | Roads: {len(state.roads):,} | Stations: {len(state.stations):,}"
        f" | Centre: {state.center[0]:.6f},{state.center[1]:.6f}"
    )
    if state.distance_text:
        print(state.distance_text)


def cmd_add(args: argparse.Namespace, config: MapConfig, storage: JsonFileStorage) -> None:
    state = AppState(storage, config=config)
    state.load_saved_markers()
    state.add_marker(parse_latlng([args.lat, args.lon]), draggable=not args.fixed, label=args.label)
    print_route(state)


def cmd_remove(args: argparse.Namespace, config: MapConfig, storage: JsonFileStorage) -> None:
    state = AppState(storage, config=config)
    state.load_saved_markers()
    handles = state.store.handles()
    if not 1 <= args.index <= len(handles):
        raise SystemExit(f"No marker at position {args.index} (have {len(handles)})")
    state.on_context_menu(handles[args.index - 1])
    print_route(state)


def cmd_list(args: argparse.Namespace, config: MapConfig, storage: JsonFileStorage) -> None:
    state = AppState(storage, config=config)
    for latlng in state.persistence.load():
        state.store.add(latlng, label=config.marker_label)
    state.route_engine.update(state.store.coordinates())
    print_route(state)


def cmd_clear(args: argparse.Namespace, config: MapConfig, storage: JsonFileStorage) -> None:
    state = AppState(storage, config=config)
    state.load_saved_markers()
    n = len(state.store)
    state.clear_markers()
    print(f"Removed {n} marker(s)")


COMMANDS = {
    "build": cmd_build,
    "add": cmd_add,
    "remove": cmd_remove,
    "list": cmd_list,
    "clear": cmd_clear,
}


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging_config.configure(args.log_level)

    config = load_config(args.config)
    storage = JsonFileStorage(args.storage)
    logger.debug("Storage: %s (key %r)", storage.path, config.storage_key)
    COMMANDS[args.command](args, config, storage)


if __name__ == "__main__":
    main()
