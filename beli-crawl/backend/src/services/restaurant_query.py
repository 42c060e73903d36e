from __future__ import annotations

from typing import Any, List, Optional, Tuple

from loguru import logger

from config import Configuration
from models import Bounds, Restaurant
from services.bbox_builder import expand_bounds
from services.ranking import rank_restaurants
from services.restaurant_store import RestaurantStore
from utils import is_valid_coordinate, to_float


def _to_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_restaurant(row: dict) -> Optional[Restaurant]:
    """Build a Restaurant from a table row; None when the id or coordinates are unusable."""
    rid = row.get("id")
    if rid is None or not str(rid).strip():
        return None
    lat = row.get("lat")
    lng = row.get("lng")
    if not is_valid_coordinate(lat, lng):
        return None

    tags = _to_str_list(row.get("tags"))
    cuisine = _optional_str(row.get("cuisine")) or (tags[0] if tags else None)

    return Restaurant(
        id=str(rid),
        name=str(row.get("name") or ""),
        city=str(row.get("city") or ""),
        lat=float(lat),
        lng=float(lng),
        address=_optional_str(row.get("address")),
        beli_score=to_float(row.get("beli_score")) or 0.0,
        is_bookmarked=bool(row.get("is_bookmarked") or False),
        tags=tags,
        price=_optional_str(row.get("price")),
        cuisine=cuisine,
    )


def query_restaurants(
    cfg: Configuration,
    store: RestaurantStore,
    *,
    city: str,
    bounds: Bounds,
    center: Tuple[float, float],  # lat, lng
) -> List[Restaurant]:
    """Restaurants inside the buffered bounds, scored and ordered.

    Raises RestaurantStoreError when the store query fails.
    """
    expanded = expand_bounds(bounds, cfg.bounds_buffer_deg)
    rows = store.fetch_in_bounds(expanded)

    logger.debug(
        "restaurant query city={} bounds={} expanded={} center={} found={}",
        city,
        bounds,
        expanded,
        center,
        len(rows),
    )

    restaurants: list[Restaurant] = []
    skipped = 0
    for row in rows:
        parsed = parse_restaurant(row)
        if parsed is None:
            skipped += 1
            logger.warning("skipping restaurant id={} with missing id or invalid coordinates", row.get("id"))
            continue
        if not expanded.contains(parsed.lat, parsed.lng):
            skipped += 1
            continue
        restaurants.append(parsed)

    ranked = rank_restaurants(restaurants, center=center)
    logger.info(
        "restaurant query city={} rows={} returned={} skipped={}",
        city,
        len(rows),
        len(ranked),
        skipped,
    )
    return ranked
