"""Data models for the Beli Crawl backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class Bounds:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


@dataclass
class Viewport:
    latitude: float
    longitude: float
    zoom: float = 12.0


@dataclass
class GeocodeResult:
    name: str
    center: Tuple[float, float]  # lng, lat
    place_type: str = "place"


@dataclass
class Restaurant:
    id: str
    name: str
    city: str
    lat: float
    lng: float
    address: Optional[str] = None
    beli_score: float = 0.0
    is_bookmarked: bool = False
    tags: list[str] = field(default_factory=list)
    price: Optional[str] = None  # $, $$, $$$, $$$$
    cuisine: Optional[str] = None
    # only set on query results
    distance_meters: Optional[float] = None
    score: Optional[float] = None
