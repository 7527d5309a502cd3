"""Generation tickets used to drop responses that a newer action superseded."""

from __future__ import annotations

from threading import Lock


class GenerationCounter:
    """Monotonic counter; only the most recently issued ticket is current."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._current = 0

    def next(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._current


__all__ = ["GenerationCounter"]
