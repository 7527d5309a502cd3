#!/usr/bin/env python
"""
Read-only proxy onto the Spotify catalog: track search and audio features.

Every call first obtains a bearer token from the injected provider, then
issues exactly one GET. Responses are validated into ``Track`` /
``AudioFeatures`` records. Caller mistakes raise ``InvalidRequest`` before
any network traffic; everything that goes wrong upstream, token exchange
included, raises ``UpstreamFailure``.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union
from urllib.parse import quote

import requests
from pydantic import ValidationError

from trackradar.errors import InvalidRequest, TokenAcquisitionFailed, UpstreamFailure
from trackradar.models.dto import AudioFeatures, Token, Track
from trackradar.observability.metrics import observe_upstream_latency, record_proxy_request

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = 'https://api.spotify.com/v1'
SEARCH_LIMIT = 10

# Spotify ids are base62
_TRACK_ID_RE = re.compile(r'^[A-Za-z0-9]+$')


class SupportsAcquireToken(Protocol):
    def acquire_token(self) -> Token: ...


class CatalogProxy:
    def __init__(self, token_provider: SupportsAcquireToken,
                 api_base_url: str = DEFAULT_API_BASE_URL,
                 session: Optional[requests.Session] = None,
                 timeout: float = 10.0,
                 search_limit: int = SEARCH_LIMIT):
        self._token_provider = token_provider
        self.api_base_url = api_base_url.rstrip('/')
        self._session = session or requests.Session()
        self._timeout = timeout
        self.search_limit = search_limit

    # -- validation -----------------------------------------------------

    @staticmethod
    def _require_query(query: Any) -> str:
        if not isinstance(query, str) or not query.strip():
            raise InvalidRequest("query must be a non-empty string")
        return query.strip()

    @staticmethod
    def _require_track_id(track_id: Any) -> str:
        if not isinstance(track_id, str) or not track_id.strip():
            raise InvalidRequest("trackId must be a non-empty string")
        track_id = track_id.strip()
        if not _TRACK_ID_RE.match(track_id):
            raise InvalidRequest(f"trackId {track_id!r} is not a valid catalog id")
        return track_id

    # -- upstream -------------------------------------------------------

    def _bearer_header(self) -> Dict[str, str]:
        try:
            token = self._token_provider.acquire_token()
        except TokenAcquisitionFailed as exc:
            raise UpstreamFailure("could not obtain an access token") from exc
        return {'Authorization': f"Bearer {token.access_token}"}

    def _get_json(self, mode: str, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = self._bearer_header()
        started = time.monotonic()
        try:
            response = self._session.get(url, headers=headers, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise UpstreamFailure(f"{mode} request failed: {exc}") from exc
        finally:
            observe_upstream_latency(mode, time.monotonic() - started)

        if response.status_code == 401:
            # Revoked or rotated token; the next call mints a fresh one
            invalidate = getattr(self._token_provider, 'invalidate', None)
            if invalidate is not None:
                invalidate()
        if not 200 <= response.status_code < 300:
            logger.warning(
                "Spotify %s returned HTTP %s", mode, response.status_code,
                extra={"mode": mode, "upstream_status": response.status_code},
            )
            raise UpstreamFailure(f"{mode} returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFailure(f"{mode} returned malformed JSON") from exc

    def _run(self, mode: str, call):
        try:
            result = call()
        except InvalidRequest:
            record_proxy_request(mode, "invalid")
            raise
        except UpstreamFailure as exc:
            record_proxy_request(mode, "upstream_failure")
            logger.error("Catalog %s failed: %s", mode, exc, exc_info=exc.__cause__ is not None)
            raise
        record_proxy_request(mode, "success")
        return result

    # -- operations -----------------------------------------------------

    def search(self, query: str) -> List[Track]:
        """Return at most ``search_limit`` tracks matching ``query``."""
        return self._run('search', lambda: self._search(query))

    def _search(self, query: str) -> List[Track]:
        q = self._require_query(query)
        data = self._get_json(
            'search',
            f"{self.api_base_url}/search",
            params={'q': q, 'type': 'track', 'limit': self.search_limit},
        )
        try:
            items = data['tracks']['items']
        except (KeyError, TypeError) as exc:
            raise UpstreamFailure("search response has no tracks.items") from exc
        if not isinstance(items, list):
            raise UpstreamFailure("search response tracks.items is not a list")
        try:
            tracks = [Track.model_validate(item) for item in items[: self.search_limit]]
        except ValidationError as exc:
            raise UpstreamFailure("search response contains a malformed track") from exc
        logger.info("Search %r returned %d tracks", q, len(tracks))
        return tracks

    def get_audio_features(self, track_id: str) -> AudioFeatures:
        """Return the audio-feature vector of one track."""
        return self._run('audio_features', lambda: self._audio_features(track_id))

    def _audio_features(self, track_id: str) -> AudioFeatures:
        tid = self._require_track_id(track_id)
        data = self._get_json('audio_features', f"{self.api_base_url}/audio-features/{quote(tid, safe='')}")
        try:
            return AudioFeatures.model_validate(data)
        except ValidationError as exc:
            raise UpstreamFailure(f"audio features for {tid} are malformed") from exc

    def handle(self, payload: Optional[Mapping[str, Any]]) -> Union[List[Track], AudioFeatures]:
        """Serve one proxied request: ``{"query": ...}`` or ``{"trackId": ...}``.

        A query wins when both keys are present.
        """
        if not isinstance(payload, Mapping):
            record_proxy_request('unknown', 'invalid')
            raise InvalidRequest("request body must be a JSON object")
        query = payload.get('query')
        track_id = payload.get('trackId')
        if query:
            return self.search(query)
        if track_id:
            return self.get_audio_features(track_id)
        record_proxy_request('unknown', 'invalid')
        raise InvalidRequest("either query or trackId is required")


__all__ = ["DEFAULT_API_BASE_URL", "SEARCH_LIMIT", "CatalogProxy", "SupportsAcquireToken"]
