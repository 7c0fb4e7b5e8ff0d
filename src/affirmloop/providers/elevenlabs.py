"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import os

from elevenlabs.client import ElevenLabs

from ..tts.errors import TTSAPIError, TTSAuthError
from ..tts.models import VoiceSettings, resolve_voice_id
from .base import TTSProvider


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    Provides methods to synthesize speech from text and manage voices
    using the ElevenLabs API.
    """

    def __init__(
        self, api_key: str | None = None, model_id: str = "eleven_turbo_v2_5"
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID to use for synthesis

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.model_id = model_id

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    async def synthesize(self, text: str, voice: str, pace: str) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice name (e.g. "neutral") or raw ElevenLabs voice ID
            pace: Pace identifier ("slow" or "normal")

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            ValueError: If text is empty or pace is unknown
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        voice_id = resolve_voice_id(voice)
        voice_settings = VoiceSettings.for_pace(pace)

        try:
            # Run synchronous ElevenLabs client in thread to avoid blocking event loop
            def _sync_convert() -> bytes:
                audio_generator = self._client.text_to_speech.convert(
                    text=text.strip(),
                    voice_id=voice_id,
                    model_id=self.model_id,
                    voice_settings=voice_settings.to_dict(),
                )
                return b"".join(audio_generator)

            audio_bytes = await asyncio.to_thread(_sync_convert)

        except Exception as e:
            if "unauthorized" in str(e).lower() or "401" in str(e):
                raise TTSAuthError(f"Authentication failed: {e}", e) from e
            elif "429" in str(e):
                raise TTSAPIError(f"Rate limit exceeded: {e}", 429, e) from e
            elif str(e)[:1] == "5":  # 5xx server errors
                raise TTSAPIError(f"Server error: {e}", None, e) from e
            else:
                raise TTSAPIError(f"API call failed: {e}", None, e) from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        try:

            def _sync_get_voices() -> list[dict]:
                response = self._client.voices.get_all()
                return [
                    {
                        "id": voice.voice_id,
                        "name": voice.name,
                        "provider": "elevenlabs",
                    }
                    for voice in response.voices
                ]

            voices = await asyncio.to_thread(_sync_get_voices)

        except Exception as e:
            if "unauthorized" in str(e).lower() or "401" in str(e):
                raise TTSAuthError(f"Authentication failed: {e}", e) from e
            elif "429" in str(e):
                raise TTSAPIError(f"Rate limit exceeded: {e}", 429, e) from e
            else:
                raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e

        self._voices_cache = voices
        return voices
