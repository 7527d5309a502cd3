from .cache import TokenCache
from .cancellation import GenerationCounter

__all__ = ["TokenCache", "GenerationCounter"]
