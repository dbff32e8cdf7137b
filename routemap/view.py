"""Background tile sources and the standard/detail toggle."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TileSource:
    name: str
    url: str
    attribution: str


STANDARD_TILES = TileSource(
    name="標準地図",
    url="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
    attribution="&copy; OpenStreetMap contributors",
)

DETAIL_TILES = TileSource(
    name="詳細地図",
    url="https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
    attribution="&copy; OpenTopoMap contributors",
)


class ViewMode:
    def __init__(self, base: TileSource = STANDARD_TILES, detail: TileSource = DETAIL_TILES) -> None:
        self.base = base
        self.detail = detail
        self.active = base

    @property
    def is_detail(self) -> bool:
        return self.active is self.detail

    def toggle(self) -> TileSource:
        self.active = self.base if self.is_detail else self.detail
        return self.active
