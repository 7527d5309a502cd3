"""Route blueprints exposed via Flask."""

from .spotify import spotify_bp
from .access_token import token_bp
from .health import health_bp
from .page import page_bp

__all__ = [
    "spotify_bp",
    "token_bp",
    "health_bp",
    "page_bp",
]
