from __future__ import annotations

import json
from typing import List

import pytest
from fastapi.testclient import TestClient

import main
from config import Configuration
from models import Bounds, GeocodeResult
from services.mapbox import MapboxError
from services.restaurant_store import RestaurantStoreError


CONFIGURED = Configuration(
    mapbox_access_token="pk.test",
    supabase_url="https://demo.supabase.co",
    supabase_anon_key="anon",
)

BODY = {
    "city": "Princeton, NJ",
    "bounds": {"minLat": 40.34, "minLng": -74.67, "maxLat": 40.36, "maxLng": -74.65},
    "center": {"lat": 40.35, "lng": -74.66},
}


class FakeGeocoder:
    def __init__(self, results: List[GeocodeResult] = None, error: Exception = None) -> None:
        self.results = results or []
        self.error = error
        self.queries: List[str] = []

    def search_places(self, query: str) -> List[GeocodeResult]:
        self.queries.append(query)
        if self.error:
            raise self.error
        return self.results


class FakeStore:
    def __init__(self, rows: List[dict] = None, error: Exception = None) -> None:
        self.rows = rows or []
        self.error = error

    def fetch_in_bounds(self, bounds: Bounds) -> List[dict]:
        if self.error:
            raise self.error
        return self.rows


@pytest.fixture
def client():
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def _use(cfg: Configuration = CONFIGURED, geocoder=None, store=None) -> None:
    main.app.dependency_overrides[main.get_config] = lambda: cfg
    if geocoder is not None:
        main.app.dependency_overrides[main.get_geocoder] = lambda: geocoder
    if store is not None:
        main.app.dependency_overrides[main.get_store] = lambda: store


def test_healthz(client) -> None:
    _use()
    assert client.get("/healthz").json() == {"status": "ok"}


# geocode


def test_geocode_requires_query(client) -> None:
    _use(geocoder=FakeGeocoder())
    resp = client.get("/api/geocode")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing query parameter"}

    assert client.get("/api/geocode", params={"q": "   "}).status_code == 400


def test_geocode_requires_token(client) -> None:
    _use(cfg=Configuration(), geocoder=FakeGeocoder())
    resp = client.get("/api/geocode", params={"q": "Princeton"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Mapbox access token not configured"}


def test_geocode_results(client) -> None:
    geocoder = FakeGeocoder([GeocodeResult(name="Princeton, New Jersey", center=(-74.66, 40.35), place_type="place")])
    _use(geocoder=geocoder)
    resp = client.get("/api/geocode", params={"q": "Princeton"})
    assert resp.status_code == 200
    assert resp.json() == {
        "results": [{"name": "Princeton, New Jersey", "center": [-74.66, 40.35], "placeType": "place"}]
    }
    assert geocoder.queries == ["Princeton"]


def test_geocode_provider_status_passthrough(client) -> None:
    _use(geocoder=FakeGeocoder(error=MapboxError("upstream 401", status_code=401)))
    resp = client.get("/api/geocode", params={"q": "Princeton"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Geocoding API error"}


def test_geocode_network_failure_is_500(client) -> None:
    _use(geocoder=FakeGeocoder(error=MapboxError("request error: timeout")))
    resp = client.get("/api/geocode", params={"q": "Princeton"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


# restaurants


def test_restaurants_requires_supabase(client) -> None:
    _use(cfg=Configuration(), store=FakeStore())
    resp = client.post("/api/restaurants", json=BODY)
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Supabase not configured")


def test_restaurants_missing_fields(client) -> None:
    _use(store=FakeStore())
    resp = client.post("/api/restaurants", json={"city": "Princeton, NJ"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields: city, bounds, center"}

    resp = client.post("/api/restaurants", json={**BODY, "city": ""})
    assert resp.status_code == 400


def test_restaurants_malformed_body(client) -> None:
    _use(store=FakeStore())
    resp = client.post("/api/restaurants", json={**BODY, "bounds": {"minLat": "north"}})
    assert resp.status_code == 400
    assert "error" in resp.json()


def _post_raw(client, body: dict):
    # json.dumps keeps NaN/Infinity literals, which the request parser accepts
    return client.post(
        "/api/restaurants", content=json.dumps(body), headers={"Content-Type": "application/json"}
    )


@pytest.mark.parametrize(
    "override",
    [
        {"center": {"lat": float("nan"), "lng": -74.66}},
        {"center": {"lat": 40.35, "lng": float("inf")}},
        {"center": {"lat": 120.0, "lng": -74.66}},
        {"bounds": {**BODY["bounds"], "minLat": float("nan")}},
        {"bounds": {**BODY["bounds"], "maxLng": 200.0}},
    ],
)
def test_restaurants_rejects_invalid_coordinates(client, override) -> None:
    _use(store=FakeStore([{"id": "a", "name": "Near", "city": "Princeton", "lat": 40.35, "lng": -74.66}]))
    resp = _post_raw(client, {**BODY, **override})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_restaurants_empty_is_success(client) -> None:
    _use(store=FakeStore([]))
    resp = client.post("/api/restaurants", json=BODY)
    assert resp.status_code == 200
    assert resp.json() == {"restaurants": []}


def test_restaurants_scored_and_sorted(client) -> None:
    rows = [
        {"id": "a", "name": "Near", "city": "Princeton", "lat": 40.35, "lng": -74.66, "beli_score": 7.1, "tags": ["Pizza"]},
        {"id": "b", "name": "Best", "city": "Princeton", "lat": 40.355, "lng": -74.655, "beli_score": 9.2, "is_bookmarked": True, "price": "$$"},
        {"id": "c", "name": "Broken", "city": "Princeton", "lat": None, "lng": -74.66},
    ]
    _use(store=FakeStore(rows))
    resp = client.post("/api/restaurants", json=BODY)
    assert resp.status_code == 200

    data = resp.json()["restaurants"]
    assert [r["id"] for r in data] == ["b", "a"]
    best, near = data
    assert best["beliScore"] == 9.2
    assert best["isBookmarked"] is True
    assert best["price"] == "$$"
    assert best["distanceMeters"] > 0
    assert near["distanceMeters"] == pytest.approx(0.0, abs=1e-6)
    assert near["cuisine"] == "Pizza"
    assert near["score"] == pytest.approx(0.5 + 0.3 * 0.71)


def test_restaurants_store_failure(client) -> None:
    _use(store=FakeStore(error=RestaurantStoreError("upstream 503")))
    resp = client.post("/api/restaurants", json=BODY)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch restaurants"}


# crawl


def test_crawl_link(client) -> None:
    resp = client.post(
        "/api/crawl",
        json={"stops": [{"name": "Tiger Noodles", "city": "Princeton"}, {"name": "Small World", "city": "Princeton"}]},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert "origin=Tiger%20Noodles%2C%20Princeton" in data["url"]
    assert "destination=Small%20World%2C%20Princeton" in data["url"]
    assert data["message"].startswith("Let's go on a Beli Crawl!")


def test_crawl_requires_stops(client) -> None:
    resp = client.post("/api/crawl", json={"stops": []})
    assert resp.status_code == 400
    assert resp.json() == {"error": "At least one stop is required"}
