"""In-memory bearer token cache keyed by expiry time."""

from __future__ import annotations

import time
from threading import RLock
from typing import Callable, Optional

from trackradar.models.dto import Token


class TokenCache:
    """Thread-safe holder for one token, handed out until shortly before it expires."""

    def __init__(self, margin: float = 60.0, clock: Callable[[], float] = time.time) -> None:
        if margin < 0:
            raise ValueError("margin must not be negative")
        self.margin = margin
        self._clock = clock
        self._token: Optional[Token] = None
        self._lock = RLock()

    def get(self) -> Optional[Token]:
        with self._lock:
            token = self._token
            if token is None:
                return None
            if token.is_expired(now=self._clock(), margin=self.margin):
                self._token = None
                return None
            return token

    def set(self, token: Token) -> None:
        with self._lock:
            self._token = token

    def get_or_load(self, loader: Callable[[], Token]) -> Token:
        """Return the cached token or store and return a freshly loaded one."""
        with self._lock:
            cached = self.get()
            if cached is not None:
                return cached
            token = loader()
            self._token = token
            return token

    def clear(self) -> None:
        with self._lock:
            self._token = None


__all__ = ["TokenCache"]
