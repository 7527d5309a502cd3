#!/usr/bin/env python
"""Error taxonomy shared by the catalog services and the HTTP surface."""

from __future__ import annotations


class TrackRadarError(Exception):
    """Base class for all application errors."""


class ConfigurationError(TrackRadarError):
    """Credentials or settings are missing or invalid at start-up."""


class TokenAcquisitionFailed(TrackRadarError):
    """The client-credentials exchange did not yield an access token."""


class InvalidRequest(TrackRadarError):
    """The caller supplied neither a query nor a track id, or an empty one."""


class UpstreamFailure(TrackRadarError):
    """The catalog API (or its token endpoint) failed to answer usefully."""


__all__ = [
    "TrackRadarError",
    "ConfigurationError",
    "TokenAcquisitionFailed",
    "InvalidRequest",
    "UpstreamFailure",
]
