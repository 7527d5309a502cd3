"""Catalog domain services (token exchange, search and audio features)."""

from .catalog_proxy import CatalogProxy
from .token_provider import CachingTokenProvider, TokenProvider

__all__ = ["CatalogProxy", "CachingTokenProvider", "TokenProvider"]
