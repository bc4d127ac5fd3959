from __future__ import annotations

from typing import Iterable

from src.domain.models import GeoPoint


def bounding_box(
    points: Iterable[GeoPoint],
) -> tuple[float, float, float, float] | None:
    """Return (south, west, north, east) covering all points, or None if empty."""

    south = west = float("inf")
    north = east = float("-inf")
    seen = False
    for p in points:
        seen = True
        south = min(south, p.lat)
        north = max(north, p.lat)
        west = min(west, p.lon)
        east = max(east, p.lon)

    if not seen:
        return None
    return (south, west, north, east)
