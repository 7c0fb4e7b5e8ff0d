"""Content-addressable audio cache for synthesized affirmations."""

from .locks import KeyedLock
from .manager import AudioCache, cache_key
from .models import CacheEntry, CacheStats
from .storage import CacheStorage

__all__ = [
    "AudioCache",
    "CacheEntry",
    "CacheStats",
    "CacheStorage",
    "KeyedLock",
    "cache_key",
]
