from __future__ import annotations

import math
from typing import List, Tuple

from models import Restaurant
from utils import haversine_m


DISTANCE_SCALE_M = 1000.0

WEIGHT_PROXIMITY = 0.5
WEIGHT_QUALITY = 0.3
WEIGHT_BOOKMARK = 0.2


def normalize_distance(distance_meters: float) -> float:
    """Closer is better: 1.0 at the center, decaying with a 1 km scale."""
    return math.exp(-distance_meters / DISTANCE_SCALE_M)


def bookmark_boost(is_bookmarked: bool) -> float:
    return 1.0 if is_bookmarked else 0.0


def compute_trip_score(distance_meters: float, beli_score: float, is_bookmarked: bool) -> float:
    return (
        WEIGHT_PROXIMITY * normalize_distance(distance_meters)
        + WEIGHT_QUALITY * (beli_score / 10.0)
        + WEIGHT_BOOKMARK * bookmark_boost(is_bookmarked)
    )


def _sort_key(r: Restaurant) -> Tuple[float, float]:
    return (-(r.beli_score or 0.0), r.distance_meters or 0.0)


def rank_restaurants(
    restaurants: List[Restaurant],
    *,
    center: Tuple[float, float],  # lat, lng
) -> List[Restaurant]:
    """Annotate distance and trip score, then order by Beli score.

    Ordering uses the raw Beli score (descending) with distance as the
    tie-break; the computed `score` is reported but does not drive the order.
    """
    center_lat, center_lng = center
    ranked: list[Restaurant] = []
    for r in restaurants:
        r.distance_meters = haversine_m(center_lat, center_lng, r.lat, r.lng)
        r.score = compute_trip_score(r.distance_meters, r.beli_score or 0.0, bool(r.is_bookmarked))
        ranked.append(r)

    ranked.sort(key=_sort_key)
    return ranked
