"""Abstract base class for speech providers."""

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Turns one affirmation line into audio.

    The audio cache is the only caller of synthesize, so implementations
    need no caching of their own. Voices returned by list_voices are dicts
    with "id", "name" and "provider" keys.
    """

    @abstractmethod
    async def synthesize(self, text: str, voice: str, pace: str) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to speak
            voice: Voice name or provider voice id
            pace: Pace identifier ("slow" or "normal")

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return the voices this provider offers.

        Raises:
            TTSError: If voice listing fails
        """
        pass
