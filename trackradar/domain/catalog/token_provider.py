#!/usr/bin/env python
"""
Client-credentials token exchange against the Spotify accounts service.

``TokenProvider`` performs one exchange per call. ``CachingTokenProvider``
wraps it and hands out the same token until shortly before it expires.
"""

from __future__ import annotations

import base64
import logging
import math
import time
from typing import Callable, Optional

import requests
from pydantic import ValidationError

from trackradar.errors import TokenAcquisitionFailed
from trackradar.models.dto import Credentials, Token
from trackradar.observability.metrics import record_token_acquisition, record_token_cache_hit
from trackradar.utils.cache import TokenCache

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URL = 'https://accounts.spotify.com/api/token'
DEFAULT_EXPIRES_IN = 3600


def basic_auth_header(credentials: Credentials) -> str:
    raw = f"{credentials.client_id}:{credentials.client_secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


class TokenProvider:
    def __init__(self, credentials: Credentials,
                 token_url: str = DEFAULT_TOKEN_URL,
                 session: Optional[requests.Session] = None,
                 timeout: float = 10.0,
                 clock: Callable[[], float] = time.time):
        self._credentials = credentials
        self.token_url = token_url
        self._session = session or requests.Session()
        self._timeout = timeout
        self._clock = clock

    def acquire_token(self) -> Token:
        """Exchange the client credentials for a bearer token.

        Any failure (transport error, non-2xx status, unreadable body) is
        reported as ``TokenAcquisitionFailed``; the cause is chained and logged.
        """
        try:
            token = self._exchange()
        except TokenAcquisitionFailed as exc:
            record_token_acquisition(False)
            logger.warning("Spotify token exchange failed: %s", exc.__cause__ or exc)
            raise
        record_token_acquisition(True)
        logger.debug("Spotify access token acquired, expires at %s", token.expires_at)
        return token

    def _exchange(self) -> Token:
        headers = {
            'Authorization': basic_auth_header(self._credentials),
            'Content-Type': 'application/x-www-form-urlencoded',
        }
        try:
            response = self._session.post(
                self.token_url,
                headers=headers,
                data={'grant_type': 'client_credentials'},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise TokenAcquisitionFailed("token endpoint unreachable") from exc

        if not 200 <= response.status_code < 300:
            raise TokenAcquisitionFailed(f"token endpoint returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise TokenAcquisitionFailed("token endpoint returned malformed JSON") from exc

        access_token = body.get('access_token') if isinstance(body, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise TokenAcquisitionFailed("token endpoint response has no access_token")

        try:
            expires_in = float(body.get('expires_in', DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN
        if not math.isfinite(expires_in):
            expires_in = DEFAULT_EXPIRES_IN
        # A negative lifetime means the token is already stale
        expires_in = max(expires_in, 0.0)

        try:
            return Token(
                access_token=access_token,
                token_type=body.get('token_type') or 'Bearer',
                expires_at=self._clock() + expires_in,
            )
        except ValidationError as exc:
            raise TokenAcquisitionFailed("token endpoint response is malformed") from exc


class CachingTokenProvider:
    """Reuse one token across proxied calls until it is about to expire."""

    def __init__(self, provider: TokenProvider, cache: Optional[TokenCache] = None):
        self._provider = provider
        self._cache = cache or TokenCache()

    def acquire_token(self) -> Token:
        cached = self._cache.get()
        if cached is not None:
            record_token_cache_hit()
            return cached
        return self._cache.get_or_load(self._provider.acquire_token)

    def invalidate(self) -> None:
        self._cache.clear()


__all__ = ["DEFAULT_TOKEN_URL", "basic_auth_header", "TokenProvider", "CachingTokenProvider"]
