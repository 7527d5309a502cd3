"""Record types exchanged between the proxy, the view and the HTTP layer."""

from .dto import Album, Artist, AudioFeatures, Credentials, Image, Token, Track
from .pitch import PITCH_CLASS, UNKNOWN_KEY, describe_key

__all__ = [
    "Album",
    "Artist",
    "AudioFeatures",
    "Credentials",
    "Image",
    "Token",
    "Track",
    "PITCH_CLASS",
    "UNKNOWN_KEY",
    "describe_key",
]
