from __future__ import annotations

from typing import List, Protocol

import requests

from config import Configuration
from models import Bounds


class RestaurantStoreError(RuntimeError):
    pass


class RestaurantStore(Protocol):
    def fetch_in_bounds(self, bounds: Bounds) -> List[dict]:
        ...


class SupabaseRestaurantStore:
    """Reads the restaurant table through Supabase's PostgREST endpoint.

    The table has no spatial index, so the rectangle is expressed as four
    independent range filters on `lat` and `lng`.
    """

    def __init__(self, cfg: Configuration) -> None:
        self.cfg = cfg
        self.base = (cfg.supabase_url or "").rstrip("/")
        self.session = requests.Session()

    def _headers(self) -> dict:
        key = self.cfg.supabase_anon_key or ""
        return {
            "Accept": "application/json",
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }

    def fetch_in_bounds(self, bounds: Bounds) -> List[dict]:
        url = f"{self.base}/rest/v1/{self.cfg.restaurants_table}"
        params = [
            ("select", "*"),
            ("lat", f"gte.{bounds.min_lat}"),
            ("lat", f"lte.{bounds.max_lat}"),
            ("lng", f"gte.{bounds.min_lng}"),
            ("lng", f"lte.{bounds.max_lng}"),
        ]
        try:
            resp = self.session.get(url, headers=self._headers(), params=params, timeout=self.cfg.supabase_timeout)
        except requests.RequestException as exc:
            raise RestaurantStoreError(f"request error: {exc}")

        if not resp.ok:
            snippet = resp.text[:300]
            raise RestaurantStoreError(f"upstream {resp.status_code}: {snippet}")

        try:
            rows = resp.json()
        except ValueError:
            raise RestaurantStoreError("invalid json response")
        if not isinstance(rows, list):
            raise RestaurantStoreError("unexpected payload shape")
        return [r for r in rows if isinstance(r, dict)]
