from __future__ import annotations

from models import Bounds, Viewport


BOUNDS_BUFFER_DEG = 0.01  # ~1 km
VIEWPORT_HALF_SPAN_DEG = 0.01


def expand_bounds(bounds: Bounds, buffer: float = BOUNDS_BUFFER_DEG) -> Bounds:
    """Pad a rectangle by `buffer` degrees on every side.

    Keeps restaurants just outside the visible map area in the result set.
    """
    return Bounds(
        min_lat=bounds.min_lat - buffer,
        min_lng=bounds.min_lng - buffer,
        max_lat=bounds.max_lat + buffer,
        max_lng=bounds.max_lng + buffer,
    )


def bounds_from_viewport(viewport: Viewport, half_span: float = VIEWPORT_HALF_SPAN_DEG) -> Bounds:
    """Rectangle of ±half_span degrees around the viewport center."""
    return Bounds(
        min_lat=viewport.latitude - half_span,
        min_lng=viewport.longitude - half_span,
        max_lat=viewport.latitude + half_span,
        max_lng=viewport.longitude + half_span,
    )
