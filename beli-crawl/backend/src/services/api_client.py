from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import requests

from models import Bounds, GeocodeResult, Restaurant
from services.crawl import NamedStop


class ApiClientError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def bounds_to_json(bounds: Bounds) -> dict:
    return {
        "minLat": bounds.min_lat,
        "minLng": bounds.min_lng,
        "maxLat": bounds.max_lat,
        "maxLng": bounds.max_lng,
    }


def restaurant_from_json(data: dict) -> Restaurant:
    return Restaurant(
        id=str(data["id"]),
        name=data.get("name") or "",
        city=data.get("city") or "",
        lat=float(data["lat"]),
        lng=float(data["lng"]),
        address=data.get("address"),
        beli_score=float(data.get("beliScore") or 0.0),
        is_bookmarked=bool(data.get("isBookmarked") or False),
        tags=list(data.get("tags") or []),
        price=data.get("price"),
        cuisine=data.get("cuisine"),
        distance_meters=data.get("distanceMeters"),
        score=data.get("score"),
    )


class BeliCrawlClient:
    """Calls the Beli Crawl HTTP API.

    `restaurants` matches the planner's fetcher signature, so an instance's
    bound method can be handed straight to `TripPlanner`.
    """

    def __init__(self, base_url: str = "http://localhost:8000", *, timeout: int = 15) -> None:
        self.base = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _handle(self, resp: requests.Response) -> dict:
        try:
            payload = resp.json()
        except ValueError:
            raise ApiClientError("invalid json response", status_code=resp.status_code)
        if not resp.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise ApiClientError(message or f"http {resp.status_code}", status_code=resp.status_code)
        return payload

    def geocode(self, query: str) -> List[GeocodeResult]:
        resp = self.session.get(f"{self.base}/api/geocode", params={"q": query}, timeout=self.timeout)
        payload = self._handle(resp)
        out: list[GeocodeResult] = []
        for item in payload.get("results") or []:
            center = item.get("center") or []
            if len(center) < 2:
                continue
            out.append(
                GeocodeResult(
                    name=item.get("name") or "",
                    center=(float(center[0]), float(center[1])),
                    place_type=item.get("placeType") or "place",
                )
            )
        return out

    def restaurants(self, city: str, bounds: Bounds, center: Tuple[float, float]) -> List[Restaurant]:
        body = {
            "city": city,
            "bounds": bounds_to_json(bounds),
            "center": {"lat": center[0], "lng": center[1]},
        }
        resp = self.session.post(f"{self.base}/api/restaurants", json=body, timeout=self.timeout)
        payload = self._handle(resp)
        return [restaurant_from_json(r) for r in payload.get("restaurants") or []]

    def crawl_link(self, stops: Sequence[NamedStop]) -> dict:
        body = {"stops": [{"name": s.name, "city": s.city} for s in stops]}
        resp = self.session.post(f"{self.base}/api/crawl", json=body, timeout=self.timeout)
        return self._handle(resp)
