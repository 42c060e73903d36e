"""Utility helpers for the Beli Crawl backend."""

from __future__ import annotations

import math
from typing import Any, Optional


EARTH_RADIUS_M = 6371000.0


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    if not value:
        return "unset"
    if len(value) <= visible * 2:
        return "*" * len(value)
    return f"{value[:visible]}...{value[-visible:]}"


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # rounding can push `a` just past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def to_float(value: Any) -> Optional[float]:
    """Coerce a number-ish value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(out):
        return None
    return out


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    lat_f = to_float(lat)
    lng_f = to_float(lng)
    if lat_f is None or lng_f is None:
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0
