from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field

from utils import mask_secret


class Configuration(BaseModel):
    # Mapbox
    mapbox_access_token: Optional[str] = Field(default=None)
    mapbox_base_url: str = Field(default="https://api.mapbox.com")
    mapbox_timeout: int = Field(default=10)
    geocode_limit: int = Field(default=5)

    # Supabase (PostgREST)
    supabase_url: Optional[str] = Field(default=None)
    supabase_anon_key: Optional[str] = Field(default=None)
    supabase_timeout: int = Field(default=15)
    restaurants_table: str = Field(default="restaurants")

    # Query
    bounds_buffer_deg: float = Field(default=0.01)

    @classmethod
    def from_env(cls, overrides: Optional[dict[str, Any]] = None) -> "Configuration":
        raw: dict[str, Any] = {}

        env_map = {
            "mapbox_access_token": os.getenv("MAPBOX_ACCESS_TOKEN") or os.getenv("NEXT_PUBLIC_MAPBOX_ACCESS_TOKEN"),
            "mapbox_base_url": os.getenv("MAPBOX_BASE_URL"),
            "mapbox_timeout": os.getenv("MAPBOX_TIMEOUT"),
            "geocode_limit": os.getenv("GEOCODE_LIMIT"),
            "supabase_url": os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL"),
            "supabase_anon_key": os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY"),
            "supabase_timeout": os.getenv("SUPABASE_TIMEOUT"),
            "restaurants_table": os.getenv("RESTAURANTS_TABLE"),
            "bounds_buffer_deg": os.getenv("BOUNDS_BUFFER_DEG"),
        }

        for k, v in env_map.items():
            if v is None:
                continue
            raw[k] = v

        if overrides:
            raw.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**raw)

    def require_mapbox(self) -> None:
        if not self.mapbox_access_token:
            raise ValueError("Mapbox access token not configured")

    def require_supabase(self) -> None:
        if not self.supabase_url or not self.supabase_anon_key:
            raise ValueError(
                "Supabase not configured. Please set SUPABASE_URL and SUPABASE_ANON_KEY"
            )

    def log_summary(self) -> str:
        return (
            "mapbox=%s base=%s timeout=%s token=%s supabase=%s table=%s anon_key=%s buffer=%.3f"
            % (
                bool(self.mapbox_access_token),
                self.mapbox_base_url,
                self.mapbox_timeout,
                mask_secret(self.mapbox_access_token),
                self.supabase_url or "unset",
                self.restaurants_table,
                mask_secret(self.supabase_anon_key),
                self.bounds_buffer_deg,
            )
        )
