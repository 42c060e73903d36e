from __future__ import annotations

import urllib.parse
from typing import List, Optional

import requests

from config import Configuration
from models import GeocodeResult
from utils import is_valid_coordinate


MAX_GEOCODE_RESULTS = 5


class MapboxError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MapboxClient:
    """Place search against the Mapbox geocoding v5 API.

    Single attempt per call, no caching.
    """

    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg
        self.base = cfg.mapbox_base_url.rstrip("/")
        self.session = requests.Session()

    def _get(self, path: str, params: dict) -> dict:
        url = f"{self.base}{path}"
        headers = {"Accept": "application/json"}
        params = {**params, "access_token": self.cfg.mapbox_access_token}
        try:
            resp = self.session.get(url, headers=headers, params=params, timeout=self.cfg.mapbox_timeout)
        except requests.RequestException as exc:
            raise MapboxError(f"request error: {exc}")

        if not resp.ok:
            snippet = resp.text[:300]
            raise MapboxError(f"upstream {resp.status_code}: {snippet}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError:
            raise MapboxError("invalid json response")

    def _parse_features(self, features: List[dict]) -> List[GeocodeResult]:
        results: list[GeocodeResult] = []
        for feat in features:
            center = feat.get("center")
            if not isinstance(center, list) or len(center) < 2:
                continue
            lng, lat = center[0], center[1]
            if not is_valid_coordinate(lat, lng):
                continue
            place_types = feat.get("place_type") or []
            place_type = place_types[0] if place_types else "place"
            name = feat.get("place_name") or feat.get("text") or ""
            results.append(
                GeocodeResult(name=str(name), center=(float(lng), float(lat)), place_type=str(place_type))
            )
        return results

    def search_places(self, query: str) -> List[GeocodeResult]:
        limit = min(MAX_GEOCODE_RESULTS, max(1, self.cfg.geocode_limit))
        encoded = urllib.parse.quote(query, safe="")
        payload = self._get(
            f"/geocoding/v5/mapbox.places/{encoded}.json",
            {"types": "place", "limit": limit},
        )
        features = payload.get("features") or []
        return self._parse_features(features)[:limit]
