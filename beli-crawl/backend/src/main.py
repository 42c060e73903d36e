from __future__ import annotations

from typing import List, Optional, Tuple

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Configuration
from models import Bounds, GeocodeResult, Restaurant
from services.crawl import build_share_message, build_walking_url
from services.mapbox import MapboxClient, MapboxError
from services.restaurant_query import query_restaurants
from services.restaurant_store import RestaurantStore, RestaurantStoreError, SupabaseRestaurantStore


load_dotenv()

app = FastAPI(title="Beli Crawl API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("rejected request {} {}: {}", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# Dependencies (overridable in tests)


def get_config() -> Configuration:
    return Configuration.from_env()


def get_geocoder(cfg: Configuration = Depends(get_config)) -> MapboxClient:
    return MapboxClient(cfg)


def get_store(cfg: Configuration = Depends(get_config)) -> RestaurantStore:
    return SupabaseRestaurantStore(cfg)


# Payloads


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class _CoordinateModel(BaseModel):
    # NaN, infinities and out-of-range degrees are rejected as a 400.
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)


class BoundsPayload(_CoordinateModel):
    min_lat: float = Field(..., alias="minLat", ge=-90, le=90)
    min_lng: float = Field(..., alias="minLng", ge=-180, le=180)
    max_lat: float = Field(..., alias="maxLat", ge=-90, le=90)
    max_lng: float = Field(..., alias="maxLng", ge=-180, le=180)


class CenterPayload(_CoordinateModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RestaurantsRequest(BaseModel):
    city: Optional[str] = None
    bounds: Optional[BoundsPayload] = None
    center: Optional[CenterPayload] = None


class RestaurantPayload(_CamelModel):
    id: str
    name: str
    city: str
    lat: float
    lng: float
    address: Optional[str] = None
    beli_score: float = Field(0.0, alias="beliScore")
    is_bookmarked: bool = Field(False, alias="isBookmarked")
    tags: List[str] = []
    price: Optional[str] = None
    cuisine: Optional[str] = None
    distance_meters: Optional[float] = Field(None, alias="distanceMeters")
    score: Optional[float] = None


class RestaurantsResponse(BaseModel):
    restaurants: List[RestaurantPayload]


class GeocodePayload(_CamelModel):
    name: str
    center: Tuple[float, float]  # lng, lat
    place_type: str = Field("place", alias="placeType")


class GeocodeResponse(BaseModel):
    results: List[GeocodePayload]


class StopPayload(BaseModel):
    name: str
    city: str


class CrawlRequest(BaseModel):
    stops: List[StopPayload] = []


class CrawlResponse(BaseModel):
    url: str
    message: str


def to_restaurant_payload(r: Restaurant) -> RestaurantPayload:
    return RestaurantPayload(
        id=r.id,
        name=r.name,
        city=r.city,
        lat=r.lat,
        lng=r.lng,
        address=r.address,
        beli_score=r.beli_score,
        is_bookmarked=r.is_bookmarked,
        tags=list(r.tags),
        price=r.price,
        cuisine=r.cuisine,
        distance_meters=r.distance_meters,
        score=r.score,
    )


def to_geocode_payload(g: GeocodeResult) -> GeocodePayload:
    return GeocodePayload(name=g.name, center=g.center, place_type=g.place_type)


# Routes


@app.get("/healthz")
def healthz(cfg: Configuration = Depends(get_config)) -> dict:
    logger.info("cfg: {}", cfg.log_summary())
    return {"status": "ok"}


@app.get("/api/geocode", response_model=GeocodeResponse)
def geocode(
    q: Optional[str] = None,
    cfg: Configuration = Depends(get_config),
    geocoder: MapboxClient = Depends(get_geocoder),
) -> GeocodeResponse:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing query parameter")

    try:
        cfg.require_mapbox()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    try:
        results = geocoder.search_places(q)
    except MapboxError as exc:
        if exc.status_code is not None:
            logger.warning("geocoding provider error q={!r}: {}", q, exc)
            raise HTTPException(status_code=exc.status_code, detail="Geocoding API error")
        logger.exception("geocoding failed: {}", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    except Exception as exc:
        logger.exception("geocoding failed: {}", exc)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info("geocode q={!r} results={}", q, len(results))
    return GeocodeResponse(results=[to_geocode_payload(g) for g in results])


@app.post("/api/restaurants", response_model=RestaurantsResponse)
def restaurants(
    req: RestaurantsRequest,
    cfg: Configuration = Depends(get_config),
    store: RestaurantStore = Depends(get_store),
) -> RestaurantsResponse:
    try:
        cfg.require_supabase()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    if not req.city or req.bounds is None or req.center is None:
        raise HTTPException(status_code=400, detail="Missing required fields: city, bounds, center")

    bounds = Bounds(
        min_lat=req.bounds.min_lat,
        min_lng=req.bounds.min_lng,
        max_lat=req.bounds.max_lat,
        max_lng=req.bounds.max_lng,
    )
    try:
        ranked = query_restaurants(
            cfg,
            store,
            city=req.city,
            bounds=bounds,
            center=(req.center.lat, req.center.lng),
        )
    except RestaurantStoreError as exc:
        logger.error("restaurant store error: {}", exc)
        raise HTTPException(status_code=500, detail="Failed to fetch restaurants")
    except Exception as exc:
        logger.exception("restaurant query failed: {}", exc)
        raise HTTPException(status_code=500, detail="Internal server error")

    return RestaurantsResponse(restaurants=[to_restaurant_payload(r) for r in ranked])


@app.post("/api/crawl", response_model=CrawlResponse)
def crawl(req: CrawlRequest) -> CrawlResponse:
    if not req.stops:
        raise HTTPException(status_code=400, detail="At least one stop is required")
    return CrawlResponse(url=build_walking_url(req.stops), message=build_share_message(req.stops))
