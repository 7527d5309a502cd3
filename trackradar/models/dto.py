#!/usr/bin/env python
"""
Pydantic records for the values that cross the catalog proxy boundary.

Upstream JSON is validated into these shapes before it reaches a caller, so
a response missing a required field surfaces as an upstream failure rather
than a KeyError deep inside the view. Unknown upstream fields are kept and
passed through untouched.
"""

from __future__ import annotations

import time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from trackradar.models.pitch import describe_key


class Credentials(BaseModel):
    """Client id/secret pair for the client-credentials grant."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1, repr=False)


class Token(BaseModel):
    """Bearer token minted by the token endpoint."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1, repr=False)
    token_type: str = "Bearer"
    expires_at: float

    def is_expired(self, now: Optional[float] = None, margin: float = 0.0) -> bool:
        current = time.time() if now is None else now
        return current >= self.expires_at - margin


class Image(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    height: Optional[int] = None
    width: Optional[int] = None


class Artist(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    id: Optional[str] = None


class Album(BaseModel):
    model_config = ConfigDict(extra="allow")

    images: List[Image] = Field(default_factory=list)
    name: Optional[str] = None


class Track(BaseModel):
    """A search hit as returned by the catalog API."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str
    artists: List[Artist] = Field(default_factory=list)
    album: Album = Field(default_factory=Album)

    @property
    def primary_artist(self) -> str:
        return self.artists[0].name if self.artists else "Unknown Artist"

    @property
    def thumbnail_url(self) -> Optional[str]:
        # Spotify lists album art largest first
        images = self.album.images
        return images[-1].url if images else None


class AudioFeatures(BaseModel):
    """Audio-feature vector of one track; ratios are passed through as-is."""

    model_config = ConfigDict(extra="allow")

    acousticness: float
    danceability: float
    energy: float
    instrumentalness: float
    liveness: float
    speechiness: float
    valence: Optional[float] = None
    tempo: float
    key: int
    mode: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bpm(self) -> float:
        return self.tempo

    @computed_field  # type: ignore[prop-decorator]
    @property
    def key_name(self) -> str:
        return describe_key(self.key, self.mode)


__all__ = ["Credentials", "Token", "Image", "Artist", "Album", "Track", "AudioFeatures"]
