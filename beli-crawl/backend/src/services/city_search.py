from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loguru import logger

from models import GeocodeResult
from utils import haversine_m


MIN_QUERY_LEN = 2
DEBOUNCE_SEC = 0.3


@dataclass
class NearbyCity:
    name: str
    center: Tuple[float, float]  # lng, lat


NEARBY_CITIES: List[NearbyCity] = [
    NearbyCity(name="Princeton, NJ", center=(-74.6609, 40.3493)),
    NearbyCity(name="New York, NY", center=(-74.006, 40.7128)),
]


def sort_nearby_cities(
    user_location: Optional[Tuple[float, float]],  # lat, lng
    cities: Optional[List[NearbyCity]] = None,
) -> List[NearbyCity]:
    """Closest first when the user's location is known, default order otherwise."""
    cities = list(cities if cities is not None else NEARBY_CITIES)
    if user_location is None:
        return cities
    lat, lng = user_location
    return sorted(cities, key=lambda c: haversine_m(lat, lng, c.center[1], c.center[0]))


class CitySearch:
    """Suggestion state for the "Where to?" box.

    Keystrokes are debounced; each lookup that goes out is stamped with a
    generation token and only the latest token may write suggestions, so a
    slow response for an old query never overwrites a newer one.
    """

    def __init__(
        self,
        lookup: Callable[[str], List[GeocodeResult]],
        *,
        debounce_sec: float = DEBOUNCE_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lookup = lookup
        self.debounce_sec = debounce_sec
        self._clock = clock
        self.query = ""
        self.suggestions: List[GeocodeResult] = []
        self.is_loading = False
        self._pending_since: Optional[float] = None
        self._generation = 0

    def set_query(self, query: str) -> None:
        self.query = query
        if len(query.strip()) < MIN_QUERY_LEN:
            self._invalidate()
            return
        self._pending_since = self._clock()

    def is_due(self) -> bool:
        if self._pending_since is None:
            return False
        return self._clock() - self._pending_since >= self.debounce_sec

    def begin(self) -> Optional[Tuple[int, str]]:
        """Issue the pending lookup if its debounce window has elapsed."""
        if not self.is_due():
            return None
        self._pending_since = None
        self._generation += 1
        self.is_loading = True
        return self._generation, self.query

    def complete(self, token: int, results: Optional[List[GeocodeResult]]) -> bool:
        """Apply results for `token`; stale tokens are dropped. None means failure."""
        if token != self._generation:
            logger.debug("dropping stale geocode response token={} latest={}", token, self._generation)
            return False
        self.is_loading = False
        self.suggestions = list(results or [])
        return True

    def poll(self) -> bool:
        """Run the due lookup synchronously; returns True if suggestions changed."""
        issued = self.begin()
        if issued is None:
            return False
        token, query = issued
        try:
            results: Optional[List[GeocodeResult]] = self._lookup(query)
        except Exception as exc:
            logger.warning("geocode lookup failed for {!r}: {}", query, exc)
            results = None
        return self.complete(token, results)

    def select(self, index: int) -> GeocodeResult:
        chosen = self.suggestions[index]
        self.query = ""
        self._invalidate()
        return chosen

    def _invalidate(self) -> None:
        # Bumping the generation orphans any lookup still in flight.
        self._generation += 1
        self._pending_since = None
        self.is_loading = False
        self.suggestions = []
