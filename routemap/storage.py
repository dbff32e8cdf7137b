"""Key-value storage and the marker snapshot bridge.

Storage mirrors the browser localStorage surface (string keys, string
values); the bridge keeps the ``markers`` key in sync with the marker store.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from .geo import LatLng

logger = logging.getLogger(__name__)

MARKERS_KEY = "markers"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; counts writes so callers can observe persistence."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """Storage backed by a JSON object file of string values."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


# ----------------------------
# Snapshot encoding
# ----------------------------

def encode_snapshot(coords: Sequence[LatLng]) -> str:
    return json.dumps([{"lat": float(lat), "lng": float(lon)} for lat, lon in coords])


def decode_snapshot(raw: Optional[str]) -> List[LatLng]:
    """Parse a stored snapshot; anything malformed yields no markers."""
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.debug("Stored markers are not valid JSON; ignoring")
        return []
    if not isinstance(data, list):
        logger.debug("Stored markers are not a list; ignoring")
        return []

    coords: List[LatLng] = []
    for item in data:
        if not isinstance(item, dict):
            logger.debug("Stored marker entry %r is not an object; ignoring snapshot", item)
            return []
        lat = item.get("lat")
        lng = item.get("lng")
        if isinstance(lat, bool) or isinstance(lng, bool) or not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            logger.debug("Stored marker entry %r has no numeric lat/lng; ignoring snapshot", item)
            return []
        try:
            lat_f, lng_f = float(lat), float(lng)
        except (OverflowError, ValueError):
            logger.debug("Stored marker entry %r is out of float range; ignoring snapshot", item)
            return []
        if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
            return []
        coords.append((lat_f, lng_f))
    return coords


class PersistenceBridge:
    def __init__(self, storage: KeyValueStorage, key: str = MARKERS_KEY) -> None:
        self.storage = storage
        self.key = key

    def save(self, coords: Sequence[LatLng]) -> None:
        self.storage.set_item(self.key, encode_snapshot(coords))

    def load(self) -> List[LatLng]:
        return decode_snapshot(self.storage.get_item(self.key))

    def clear(self) -> None:
        self.storage.remove_item(self.key)
