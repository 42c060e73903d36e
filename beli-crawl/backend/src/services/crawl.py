from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from models import Restaurant


MAX_STOPS_MOBILE = 9
MAX_STOPS_DESKTOP = 11
MOBILE_BREAKPOINT_PX = 768

GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/?api=1&travelmode=walking"
SHARE_HEADLINE = "Let's go on a Beli Crawl!"


class NamedStop(Protocol):
    name: str
    city: str


def max_stops_for(is_mobile: bool) -> int:
    """Google Maps caps waypoints lower on phones than on desktop."""
    return MAX_STOPS_MOBILE if is_mobile else MAX_STOPS_DESKTOP


def is_mobile_width(width_px: int) -> bool:
    return width_px < MOBILE_BREAKPOINT_PX


def limit_notice(max_stops: int) -> str:
    return f"Google Maps supports up to {max_stops} stops on this device."


@dataclass
class ToggleResult:
    added: bool = False
    removed: bool = False
    notice: Optional[str] = None


class RouteBuilder:
    """Ordered crawl stops, unique by restaurant id."""

    def __init__(self, max_stops: int = MAX_STOPS_DESKTOP) -> None:
        self.max_stops = max_stops
        self._stops: List[Restaurant] = []

    @property
    def stops(self) -> List[Restaurant]:
        return list(self._stops)

    def __len__(self) -> int:
        return len(self._stops)

    def contains(self, restaurant_id: str) -> bool:
        return any(r.id == restaurant_id for r in self._stops)

    def toggle(self, restaurant: Restaurant) -> ToggleResult:
        if self.contains(restaurant.id):
            self.remove(restaurant.id)
            return ToggleResult(removed=True)
        if len(self._stops) >= self.max_stops:
            return ToggleResult(notice=limit_notice(self.max_stops))
        self._stops.append(restaurant)
        return ToggleResult(added=True)

    def remove(self, restaurant_id: str) -> None:
        self._stops = [r for r in self._stops if r.id != restaurant_id]

    def clear(self) -> None:
        self._stops = []


def _segment(stop: NamedStop) -> str:
    return urllib.parse.quote(f"{stop.name}, {stop.city}", safe="!~*'()")


def build_walking_url(stops: Sequence[NamedStop]) -> str:
    """Google Maps walking directions through the stops in order.

    One stop: the user's location is the implicit origin. Otherwise the first
    stop is the origin, the last the destination and the rest waypoints.
    """
    if not stops:
        return ""

    if len(stops) == 1:
        return f"{GOOGLE_MAPS_DIR_URL}&destination={_segment(stops[0])}"

    origin = stops[0]
    destination = stops[-1]
    waypoints = stops[1:-1]

    url = f"{GOOGLE_MAPS_DIR_URL}&origin={_segment(origin)}&destination={_segment(destination)}"
    if waypoints:
        url += "&waypoints=" + "|".join(_segment(wp) for wp in waypoints)
    return url


def build_share_message(stops: Sequence[NamedStop]) -> str:
    if not stops:
        return ""
    listing = "\n".join(f"{idx}. {stop.name}" for idx, stop in enumerate(stops, 1))
    url = build_walking_url(stops)
    message = f"{SHARE_HEADLINE}\n\n{listing}"
    if url:
        message += f"\n\n{url}"
    return message
