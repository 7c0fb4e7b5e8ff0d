"""Unit tests for the speech provider registry."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from affirmloop.providers import ProviderRegistry
from affirmloop.providers.base import TTSProvider
from affirmloop.providers.elevenlabs import ElevenLabsProvider
from test_helpers import FakeSpeechProvider


@pytest.fixture
def clean_registry():
    """Restore the registry after a test registers extra providers."""
    saved = dict(ProviderRegistry._providers)
    yield ProviderRegistry
    ProviderRegistry._providers.clear()
    ProviderRegistry._providers.update(saved)


class TestProviderRegistry:
    """Test provider registration and lookup."""

    def test_elevenlabs_registered_by_default(self) -> None:
        assert ProviderRegistry.get("elevenlabs") is ElevenLabsProvider
        assert "elevenlabs" in ProviderRegistry.names()

    def test_unknown_provider_lists_available(self) -> None:
        """Test that a missing provider name reports what is available."""
        with pytest.raises(KeyError, match="Available providers: elevenlabs"):
            ProviderRegistry.get("nonexistent")

    def test_register_and_create(self, clean_registry) -> None:
        """Test that a registered class can be instantiated with kwargs."""
        clean_registry.register("fake", FakeSpeechProvider)

        provider = clean_registry.create("fake", delay=0.5)

        assert isinstance(provider, FakeSpeechProvider)
        assert provider.delay == 0.5
        assert clean_registry.names() == ["elevenlabs", "fake"]

    def test_create_elevenlabs(self) -> None:
        with patch("affirmloop.providers.elevenlabs.ElevenLabs"):
            provider = ProviderRegistry.create("elevenlabs", api_key="test_key")
        assert isinstance(provider, ElevenLabsProvider)


class TestProviderInterface:
    """Test the abstract provider contract."""

    def test_cannot_instantiate_abstract_provider(self) -> None:
        with pytest.raises(TypeError):
            TTSProvider()

    def test_partial_implementation_rejected(self) -> None:
        """Test that both abstract methods must be implemented."""

        class HalfProvider(TTSProvider):
            async def synthesize(self, text: str, voice: str, pace: str) -> bytes:
                return b""

        with pytest.raises(TypeError):
            HalfProvider()
