"""One-shot position request used at startup."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .geo import LatLng

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[LatLng], None]
ErrorCallback = Callable[[str], None]
Locator = Callable[[SuccessCallback, ErrorCallback], None]


def fixed_locator(latlng: LatLng) -> Locator:
    """A locator that always reports the given position."""
    def locate(on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        on_success(latlng)
    return locate


def unavailable_locator(message: str = "geolocation unavailable") -> Locator:
    def locate(on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        on_error(message)
    return locate


def request_position(
    locator: Optional[Locator],
    on_success: SuccessCallback,
    on_error: ErrorCallback,
) -> None:
    """Ask ``locator`` for the position once.

    Whatever the locator does, at most one of the callbacks runs, at most once.
    A missing locator is reported through ``on_error``.
    """
    fired = False

    def success(latlng: LatLng) -> None:
        nonlocal fired
        if fired:
            logger.debug("Ignoring repeated position callback")
            return
        fired = True
        on_success(latlng)

    def error(message: str) -> None:
        nonlocal fired
        if fired:
            return
        fired = True
        on_error(message)

    if locator is None:
        error("geolocation unavailable")
        return
    locator(success, error)
