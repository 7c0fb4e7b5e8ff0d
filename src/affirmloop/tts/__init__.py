"""TTS (Text-to-Speech) package for affirmloop.

Shared speech models and the errors raised by speech providers.
"""

from .errors import TTSAPIError, TTSAuthError, TTSError
from .models import VOICE_IDS, Pace, VoiceSettings, resolve_voice_id

__all__ = [
    "VOICE_IDS",
    "Pace",
    "TTSAPIError",
    "TTSAuthError",
    "TTSError",
    "VoiceSettings",
    "resolve_voice_id",
]
