"""Trip planner wizard state: city -> neighborhood -> results.

Holds everything the planner screen mutates (step, viewport, bounds,
restaurants, selected restaurant and crawl stops) behind explicit
transitions. Restaurant lookups go through an injected fetcher so the same
container works against the HTTP API or an in-process query.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger

from models import Bounds, Restaurant, Viewport
from services.bbox_builder import bounds_from_viewport
from services.crawl import MAX_STOPS_DESKTOP, RouteBuilder, ToggleResult
from utils import is_valid_coordinate, to_float


DEFAULT_VIEWPORT = Viewport(latitude=40.3573, longitude=-74.6553, zoom=12)  # Princeton, NJ
CITY_ZOOM = 12
FOCUS_ZOOM = 15
# Shift the map center south so the focused pin sits higher on screen.
FOCUS_OFFSET_DEG = 0.004

# city, bounds, center (lat, lng)
RestaurantFetcher = Callable[[str, Bounds, Tuple[float, float]], List[Restaurant]]


class WizardStep(str, Enum):
    CITY = "city"
    NEIGHBORHOOD = "neighborhood"
    RESULTS = "results"


class InvalidTransition(RuntimeError):
    pass


def _valid_viewport(viewport: Viewport) -> bool:
    return is_valid_coordinate(viewport.latitude, viewport.longitude) and to_float(viewport.zoom) is not None


class TripPlanner:
    def __init__(self, fetcher: RestaurantFetcher, *, max_stops: int = MAX_STOPS_DESKTOP) -> None:
        self._fetch = fetcher
        self.step = WizardStep.CITY
        self.city = ""
        self.viewport = Viewport(DEFAULT_VIEWPORT.latitude, DEFAULT_VIEWPORT.longitude, DEFAULT_VIEWPORT.zoom)
        self.bounds: Optional[Bounds] = None
        self.restaurants: List[Restaurant] = []
        self.selected_restaurant_id: Optional[str] = None
        self.route = RouteBuilder(max_stops=max_stops)
        self.is_loading = False

    @property
    def route_stops(self) -> List[Restaurant]:
        return self.route.stops

    def _require(self, *steps: WizardStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise InvalidTransition(f"not allowed in step {self.step.value!r} (expected {allowed})")

    # map interaction

    def apply_user_location(self, lat: Optional[float], lng: Optional[float]) -> bool:
        """Recenter on a geolocation fix; denied or bogus fixes keep the default."""
        if not is_valid_coordinate(lat, lng):
            logger.warning("ignoring invalid geolocation fix lat={} lng={}", lat, lng)
            return False
        self.viewport = Viewport(latitude=float(lat), longitude=float(lng), zoom=CITY_ZOOM)
        return True

    def set_viewport(self, viewport: Viewport) -> None:
        if not _valid_viewport(viewport):
            logger.warning("ignoring invalid viewport {}", viewport)
            return
        self.viewport = viewport

    def update_bounds(self, bounds: Bounds) -> None:
        self.bounds = bounds

    def current_bounds(self) -> Bounds:
        return self.bounds or bounds_from_viewport(self.viewport)

    # transitions

    def select_city(self, name: str, center: Sequence[float]) -> bool:
        self._require(WizardStep.CITY)
        if len(center) < 2 or not is_valid_coordinate(center[1], center[0]):
            logger.error("invalid coordinates for city {}: {}", name, center)
            return False
        self.city = name
        self.viewport = Viewport(latitude=float(center[1]), longitude=float(center[0]), zoom=CITY_ZOOM)
        self.step = WizardStep.NEIGHBORHOOD
        return True

    def _run_query(self) -> Optional[List[Restaurant]]:
        center = (self.viewport.latitude, self.viewport.longitude)
        self.is_loading = True
        try:
            return self._fetch(self.city, self.current_bounds(), center)
        except Exception as exc:
            logger.warning("restaurant fetch failed: {}", exc)
            return None
        finally:
            self.is_loading = False

    def confirm_neighborhood(self) -> bool:
        self._require(WizardStep.NEIGHBORHOOD)
        if not self.city:
            return False
        found = self._run_query()
        if found is None:
            return False
        self.restaurants = found
        self.step = WizardStep.RESULTS
        return True

    def search_again(self) -> bool:
        self._require(WizardStep.RESULTS)
        if not self.city:
            return False
        found = self._run_query()
        if found is None:
            return False
        self.restaurants = found
        self.selected_restaurant_id = None
        return True

    def back(self) -> None:
        if self.step == WizardStep.RESULTS:
            self.step = WizardStep.NEIGHBORHOOD
            self.restaurants = []
            self.selected_restaurant_id = None
        elif self.step == WizardStep.NEIGHBORHOOD:
            self.step = WizardStep.CITY
            self.city = ""

    def start_over(self) -> None:
        self.step = WizardStep.CITY
        self.city = ""
        self.restaurants = []
        self.route.clear()
        self.selected_restaurant_id = None

    # results

    def focus_restaurant(self, restaurant: Restaurant) -> None:
        self.selected_restaurant_id = restaurant.id
        self.viewport = Viewport(
            latitude=restaurant.lat - FOCUS_OFFSET_DEG,
            longitude=restaurant.lng,
            zoom=FOCUS_ZOOM,
        )

    def toggle_stop(self, restaurant: Restaurant) -> ToggleResult:
        result = self.route.toggle(restaurant)
        if result.notice is None:
            self.focus_restaurant(restaurant)
        return result

    def remove_stop(self, restaurant_id: str) -> None:
        self.route.remove(restaurant_id)

    def clear_stops(self) -> None:
        self.route.clear()
