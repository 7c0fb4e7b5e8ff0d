"""Data models for the audio cache."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class CacheEntry:
    """Cache entry pointing at a synthesized audio file.

    Attributes:
        cache_key: SHA-256 content key of (text, voice, pace)
        text: Exact text that was synthesized
        voice: Voice identifier used for synthesis
        pace: Pace used for synthesis
        audio_path: Path to the cached audio file
        byte_size: Size of the audio file in bytes
        created_at: When the audio was synthesized
        last_accessed_at: When the entry was last served
        access_count: Number of times the entry was served
    """

    cache_key: str
    text: str
    voice: str
    pace: str
    audio_path: Path
    byte_size: int
    created_at: datetime
    last_accessed_at: datetime
    access_count: int = 1


@dataclass(frozen=True)
class CacheStats:
    """Aggregate size of the audio cache."""

    entries: int
    total_bytes: int
    total_accesses: int
