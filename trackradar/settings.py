#!/usr/bin/env python
"""
Validated settings snapshot for the catalog services.

Merges the values of a Flask config mapping (seeded from config.Config)
with optional overrides and exposes the credentials the token provider
needs. Missing credentials are a start-up failure, never a runtime one.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from config import Config
from trackradar.errors import ConfigurationError
from trackradar.models.dto import Credentials


class AppSettings(BaseModel):
    """Application-wide settings used to wire the catalog services."""

    model_config = ConfigDict(extra="ignore")

    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    token_url: str = "https://accounts.spotify.com/api/token"
    api_base_url: str = "https://api.spotify.com/v1"

    search_limit: int = 10
    http_timeout: float = 10.0

    token_cache_enabled: bool = True
    token_expiry_margin: int = 60

    @field_validator("spotify_client_id", "spotify_client_secret", mode="before")
    @classmethod
    def _strip_secret(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("api_base_url", "token_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("search_limit", mode="before")
    @classmethod
    def _coerce_limit(cls, value: object) -> int:
        try:
            limit = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10
        # Spotify API caps at 50
        return max(1, min(limit, 50))

    @field_validator("http_timeout", mode="before")
    @classmethod
    def _coerce_timeout(cls, value: object) -> float:
        try:
            timeout = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 10.0
        return timeout if timeout > 0 else 10.0

    @field_validator("token_expiry_margin", mode="before")
    @classmethod
    def _coerce_margin(cls, value: object) -> int:
        try:
            return max(0, int(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 60


def load_app_settings(source: Optional[Mapping[str, Any]] = None, overrides: Optional[Mapping[str, Any]] = None) -> AppSettings:
    """Build settings from a config mapping (defaults to config.Config)."""
    def _get(key: str, default: Any = None) -> Any:
        if source is not None and key in source:
            return source[key]
        return getattr(Config, key, default)

    data = {
        "spotify_client_id": _get("SPOTIFY_CLIENT_ID"),
        "spotify_client_secret": _get("SPOTIFY_CLIENT_SECRET"),
        "token_url": _get("SPOTIFY_TOKEN_URL", "https://accounts.spotify.com/api/token"),
        "api_base_url": _get("SPOTIFY_API_BASE_URL", "https://api.spotify.com/v1"),
        "search_limit": _get("SEARCH_LIMIT", 10),
        "http_timeout": _get("HTTP_TIMEOUT_SECONDS", 10.0),
        "token_cache_enabled": _get("TOKEN_CACHE_ENABLED", True),
        "token_expiry_margin": _get("TOKEN_EXPIRY_MARGIN_SECONDS", 60),
    }
    if overrides:
        data.update(overrides)
    return AppSettings(**data)


def load_credentials(settings: AppSettings) -> Credentials:
    """Return the client credentials or fail loudly if either is missing."""
    missing = [
        name
        for name, value in (
            ("SPOTIFY_CLIENT_ID", settings.spotify_client_id),
            ("SPOTIFY_CLIENT_SECRET", settings.spotify_client_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            "Spotify credentials are not configured: missing " + ", ".join(missing)
        )
    return Credentials(client_id=settings.spotify_client_id, client_secret=settings.spotify_client_secret)


__all__ = ["AppSettings", "load_app_settings", "load_credentials"]
