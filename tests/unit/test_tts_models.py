"""Unit tests for TTS data models."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from affirmloop.tts.models import VOICE_IDS, Pace, VoiceSettings, resolve_voice_id


class TestVoiceSettings:
    """Test VoiceSettings validation and pace mapping."""

    def test_defaults(self) -> None:
        settings = VoiceSettings()
        assert settings.to_dict() == {
            "stability": 0.5,
            "similarity_boost": 0.75,
            "style": 0.0,
            "use_speaker_boost": True,
            "speed": 1.0,
        }

    @pytest.mark.parametrize(
        ("field", "value"),
        [("stability", 1.5), ("similarity_boost", -0.1), ("style", 2.0), ("speed", 0.5)],
    )
    def test_out_of_range_values(self, field: str, value: float) -> None:
        """Test that each bounded field is validated."""
        with pytest.raises(ValueError, match=field):
            VoiceSettings(**{field: value})

    def test_slow_pace_slows_speech(self) -> None:
        assert VoiceSettings.for_pace(Pace.SLOW).speed == 0.85
        assert VoiceSettings.for_pace("slow").speed == 0.85

    def test_normal_pace_uses_defaults(self) -> None:
        assert VoiceSettings.for_pace("normal") == VoiceSettings()

    def test_unknown_pace(self) -> None:
        with pytest.raises(ValueError):
            VoiceSettings.for_pace("brisk")


class TestVoiceResolution:
    """Test named voice lookup."""

    def test_named_voices(self) -> None:
        """Test that every offered name resolves to its provider id."""
        for name, voice_id in VOICE_IDS.items():
            assert resolve_voice_id(name) == voice_id

    def test_raw_id_passes_through(self) -> None:
        assert resolve_voice_id("custom-voice-id") == "custom-voice-id"

    def test_premium_voices_offered(self) -> None:
        assert {f"premium{n}" for n in range(1, 9)} <= set(VOICE_IDS)
