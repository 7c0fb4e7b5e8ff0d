"""TTS data models with validation."""

from dataclasses import asdict, dataclass
from enum import Enum


class Pace(str, Enum):
    """Speaking pace for synthesized affirmations."""

    SLOW = "slow"
    NORMAL = "normal"


# Named voices offered to end users, mapped to ElevenLabs voice ids
VOICE_IDS: dict[str, str] = {
    "neutral": "ZqvIIuD5aI9JFejebHiH",
    "confident": "xGDJhCwcqw94ypljc95Z",
    "premium1": "qxTFXDYbGcR8GaHSjczg",
    "premium2": "BpjGufoPiobT79j2vtj4",
    "premium3": "eUdJpUEN3EslrgE24PKx",
    "premium4": "7JxUWWyYwXK8kmqmKEnT",
    "premium5": "wdymxIQkYn7MJCYCQF2Q",
    "premium6": "zA6D7RyKdc2EClouEMkQ",
    "premium7": "KGZeK6FsnWQdrkDHnDNA",
    "premium8": "wgHvco1wiREKN0BdyVx5",
}


def resolve_voice_id(voice: str) -> str:
    """Map a named voice to its provider voice id.

    Unknown names are assumed to already be raw provider ids.
    """
    return VOICE_IDS.get(voice, voice)


@dataclass
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
        speed: Speaking speed (0.7-1.2)
    """

    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.0
    use_speaker_boost: bool = True
    speed: float = 1.0

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")
        if not 0.7 <= self.speed <= 1.2:
            raise ValueError("speed must be between 0.7 and 1.2")

    def to_dict(self) -> dict[str, float | bool]:
        return asdict(self)

    @classmethod
    def for_pace(cls, pace: Pace | str) -> "VoiceSettings":
        """Return the settings used for the given pace."""
        if Pace(pace) is Pace.SLOW:
            return cls(speed=0.85)
        return cls()
