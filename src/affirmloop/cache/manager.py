"""Content-addressable audio cache in front of a speech provider.

Coordinates CacheStorage (SQLite metadata), the audio directory, and a
TTSProvider so that each distinct (text, voice, pace) is synthesized at
most once, even under concurrent requests.
"""

import asyncio
import hashlib
import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path

from ..errors import DataIntegrityError, SynthesisError
from ..providers.base import TTSProvider
from ..tts.models import Pace, resolve_voice_id
from .locks import KeyedLock
from .models import CacheEntry
from .storage import CacheStorage

logger = logging.getLogger(__name__)


def cache_key(text: str, voice: str, pace: str) -> str:
    """SHA-256 content key of the exact text, voice and pace.

    Named voices are keyed by their provider voice id, so a name and its id
    share one entry.
    """
    payload = json.dumps([text, resolve_voice_id(voice), pace], ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class AudioCache:
    """Returns a local audio file for (text, voice, pace), synthesizing on miss.

    In-process stampedes are prevented by a per-key lock; across processes
    the UNIQUE cache key makes the first stored entry win.
    """

    def __init__(
        self,
        storage: CacheStorage,
        provider: TTSProvider,
        audio_dir: Path,
        timeout: float = 30.0,
    ) -> None:
        self.storage = storage
        self.provider = provider
        self.audio_dir = audio_dir
        self.timeout = timeout
        self._locks = KeyedLock()

        self.audio_dir.mkdir(parents=True, exist_ok=True)

    def _audio_path(self, key: str) -> Path:
        return self.audio_dir / f"{key}.mp3"

    def _serve(self, entry: CacheEntry) -> Path:
        if not entry.audio_path.exists():
            raise DataIntegrityError(
                f"Cache entry {entry.cache_key} points at missing file "
                f"{entry.audio_path}"
            )
        self.storage.touch(entry.cache_key)
        return entry.audio_path

    async def get_or_synthesize(self, text: str, voice: str, pace: str) -> Path:
        """Return the audio file for the given text, voice and pace.

        Args:
            text: Exact text to speak (not trimmed or case-folded)
            voice: Voice name or provider voice id
            pace: "slow" or "normal"

        Returns:
            Path to the cached audio file

        Raises:
            ValueError: If text or voice is empty, or pace is unknown
            SynthesisError: If the provider fails or times out
            DataIntegrityError: If a stored entry has lost its audio file
        """
        if not text:
            raise ValueError("Text cannot be empty")
        if not voice:
            raise ValueError("Voice cannot be empty")
        pace = Pace(pace).value

        key = cache_key(text, voice, pace)
        entry = self.storage.get(key)
        if entry is not None:
            logger.debug(f"Cache hit for {key[:12]}")
            return self._serve(entry)

        async with self._locks.hold(key):
            # Another request may have stored it while we waited
            entry = self.storage.get(key)
            if entry is not None:
                logger.debug(f"Cache hit for {key[:12]} after wait")
                return self._serve(entry)

            logger.debug(f"Cache miss for {key[:12]}, synthesizing")
            return await self._synthesize(key, text, voice, pace)

    async def _synthesize(self, key: str, text: str, voice: str, pace: str) -> Path:
        try:
            audio = await asyncio.wait_for(
                self.provider.synthesize(text, voice, pace), timeout=self.timeout
            )
        except TimeoutError as e:
            logger.error(f"Synthesis timed out after {self.timeout}s")
            raise SynthesisError(
                f"Synthesis timed out after {self.timeout}s", e
            ) from e
        except Exception as e:
            logger.error(f"Synthesis failed: {e}")
            raise SynthesisError(f"Synthesis failed: {e}", e) from e

        if not audio:
            raise SynthesisError("Provider returned no audio data")

        final_path = self._audio_path(key)
        tmp_path = self.audio_dir / f".{key}.{uuid.uuid4().hex}.tmp"
        try:
            tmp_path.write_bytes(audio)
            os.replace(tmp_path, final_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise SynthesisError(f"Failed to write audio file: {e}", e) from e

        now = datetime.now()
        stored = self.storage.insert(
            CacheEntry(
                cache_key=key,
                text=text,
                voice=voice,
                pace=pace,
                audio_path=final_path,
                byte_size=len(audio),
                created_at=now,
                last_accessed_at=now,
            )
        )
        logger.info(f"Cached {len(audio)} bytes of audio as {key[:12]}")
        return stored.audio_path
