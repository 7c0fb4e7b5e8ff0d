"""Unit tests for ElevenLabsProvider error handling and logic."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from affirmloop.providers.elevenlabs import ElevenLabsProvider
from affirmloop.tts.errors import TTSAPIError, TTSAuthError
from affirmloop.tts.models import VOICE_IDS


class TestElevenLabsProviderInitialization:
    """Test ElevenLabsProvider initialization and authentication error handling."""

    def test_initialization_with_provided_api_key(self) -> None:
        """Test ElevenLabsProvider initializes successfully with provided API key."""
        with patch("affirmloop.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_client = MagicMock()
            mock_elevenlabs.return_value = mock_client

            provider = ElevenLabsProvider(api_key="test_key")

            assert provider._api_key == "test_key"
            mock_elevenlabs.assert_called_once_with(api_key="test_key")
            assert provider._client == mock_client

    def test_initialization_with_env_var_api_key(self) -> None:
        """Test ElevenLabsProvider reads API key from environment variable."""
        with patch.dict(os.environ, {"ELEVENLABS_API_KEY": "env_test_key"}):
            with patch("affirmloop.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
                ElevenLabsProvider()

                mock_elevenlabs.assert_called_once_with(api_key="env_test_key")

    def test_initialization_no_api_key_raises_auth_error(self) -> None:
        """Test ElevenLabsProvider raises TTSAuthError when no API key provided."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(TTSAuthError, match="ElevenLabs API key not found"):
                ElevenLabsProvider()

    def test_initialization_client_failure_raises_auth_error(self) -> None:
        """Test ElevenLabsProvider raises TTSAuthError when the client fails."""
        with patch("affirmloop.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_elevenlabs.side_effect = Exception("Invalid API key")

            with pytest.raises(
                TTSAuthError, match="Failed to initialize ElevenLabs client"
            ):
                ElevenLabsProvider(api_key="invalid_key")


class TestElevenLabsProviderSynthesize:
    """Test ElevenLabsProvider synthesize logic and error mapping."""

    def setup_method(self) -> None:
        """Set up test provider with mocked ElevenLabs client."""
        with patch("affirmloop.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.mock_client = MagicMock()
            mock_elevenlabs.return_value = self.mock_client
            self.provider = ElevenLabsProvider(api_key="test_key")

    @pytest.mark.asyncio
    async def test_named_voice_and_slow_pace(self) -> None:
        """Test that named voices map to ids and slow pace lowers speed."""
        self.mock_client.text_to_speech.convert.return_value = iter([b"ab", b"cd"])

        result = await self.provider.synthesize("I am calm", "neutral", "slow")

        assert result == b"abcd"
        kwargs = self.mock_client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == VOICE_IDS["neutral"]
        assert kwargs["model_id"] == "eleven_turbo_v2_5"
        assert kwargs["voice_settings"]["speed"] == 0.85

    @pytest.mark.asyncio
    async def test_raw_voice_id_and_normal_pace(self) -> None:
        """Test that unknown voice names pass through as raw ids."""
        self.mock_client.text_to_speech.convert.return_value = iter([b"audio"])

        await self.provider.synthesize("I am calm", "raw-voice-id", "normal")

        kwargs = self.mock_client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == "raw-voice-id"
        assert kwargs["voice_settings"]["speed"] == 1.0

    @pytest.mark.asyncio
    async def test_whitespace_only_text_raises_value_error(self) -> None:
        """Test synthesize raises ValueError for whitespace-only text."""
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await self.provider.synthesize("   ", "neutral", "slow")

    @pytest.mark.asyncio
    async def test_unknown_pace_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            await self.provider.synthesize("I am calm", "neutral", "fast")

    @pytest.mark.asyncio
    async def test_unauthorized_error_raises_tts_auth_error(self) -> None:
        """Test synthesize maps 401/unauthorized errors to TTSAuthError."""
        self.mock_client.text_to_speech.convert.side_effect = Exception(
            "401 unauthorized"
        )

        with pytest.raises(TTSAuthError, match="Authentication failed"):
            await self.provider.synthesize("I am calm", "neutral", "slow")

    @pytest.mark.asyncio
    async def test_rate_limit_error_keeps_status(self) -> None:
        """Test synthesize maps 429 errors to TTSAPIError with status code."""
        self.mock_client.text_to_speech.convert.side_effect = Exception(
            "429 rate limit"
        )

        with pytest.raises(TTSAPIError, match="Rate limit exceeded") as exc_info:
            await self.provider.synthesize("I am calm", "neutral", "slow")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_server_error_raises_tts_api_error(self) -> None:
        """Test synthesize maps 5xx server errors to TTSAPIError."""
        self.mock_client.text_to_speech.convert.side_effect = Exception(
            "500 server error"
        )

        with pytest.raises(TTSAPIError, match="Server error"):
            await self.provider.synthesize("I am calm", "neutral", "slow")

    @pytest.mark.asyncio
    async def test_generic_error_raises_tts_api_error(self) -> None:
        self.mock_client.text_to_speech.convert.side_effect = Exception(
            "network error"
        )

        with pytest.raises(TTSAPIError, match="API call failed"):
            await self.provider.synthesize("I am calm", "neutral", "slow")

    @pytest.mark.asyncio
    async def test_no_audio_data_raises_tts_api_error(self) -> None:
        """Test synthesize raises TTSAPIError when no audio data received."""
        self.mock_client.text_to_speech.convert.return_value = iter([])

        with pytest.raises(TTSAPIError, match="No audio data received from API"):
            await self.provider.synthesize("I am calm", "neutral", "slow")


class TestElevenLabsProviderListVoices:
    """Test ElevenLabsProvider voice listing."""

    def setup_method(self) -> None:
        """Set up test provider with mocked ElevenLabs client."""
        with patch("affirmloop.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.mock_client = MagicMock()
            mock_elevenlabs.return_value = self.mock_client
            self.provider = ElevenLabsProvider(api_key="test_key")

    @pytest.mark.asyncio
    async def test_voices_transformed_and_cached(self) -> None:
        """Test voice objects become dicts and the API is called once."""
        voice = MagicMock()
        voice.voice_id = "abc123"
        voice.name = "Rachel"
        self.mock_client.voices.get_all.return_value = MagicMock(voices=[voice])

        first = await self.provider.list_voices()
        second = await self.provider.list_voices()

        assert first == [{"id": "abc123", "name": "Rachel", "provider": "elevenlabs"}]
        assert second is first
        self.mock_client.voices.get_all.assert_called_once()

    @pytest.mark.asyncio
    async def test_unauthorized_error_raises_tts_auth_error(self) -> None:
        self.mock_client.voices.get_all.side_effect = Exception("401 unauthorized")

        with pytest.raises(TTSAuthError, match="Authentication failed"):
            await self.provider.list_voices()

    @pytest.mark.asyncio
    async def test_generic_error_raises_tts_api_error(self) -> None:
        """Test list_voices maps other errors to TTSAPIError."""
        self.mock_client.voices.get_all.side_effect = Exception("network error")

        with pytest.raises(TTSAPIError, match="Failed to list voices"):
            await self.provider.list_voices()
