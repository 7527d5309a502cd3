"""Musical key naming for Spotify audio features."""

from __future__ import annotations

from typing import Optional

PITCH_CLASS = (
    'C', 'C♯/D♭', 'D', 'D♯/E♭', 'E', 'F',
    'F♯/G♭', 'G', 'G♯/A♭', 'A', 'A♯/B♭', 'B',
)

# Spotify reports key -1 when no key was detected
UNKNOWN_KEY = 'Unknown'


def describe_key(pitch_class: Optional[int], mode: Optional[int]) -> str:
    """Return e.g. ``'C Major'`` or ``'A Minor'`` for a pitch class and mode flag."""
    if pitch_class is None or not 0 <= pitch_class < len(PITCH_CLASS):
        return UNKNOWN_KEY
    return f"{PITCH_CLASS[pitch_class]} {'Major' if mode == 1 else 'Minor'}"


__all__ = ["PITCH_CLASS", "UNKNOWN_KEY", "describe_key"]
