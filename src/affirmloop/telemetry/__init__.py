"""Resolution records, feedback and the in-memory telemetry mirror."""

from .buffer import NullTelemetryBuffer, TelemetryBuffer
from .models import FeedbackResult, FeedbackStatus, ResolutionRecord, Tier, TierSummary
from .recorder import FeedbackRecorder
from .storage import RecordStorage

__all__ = [
    "FeedbackRecorder",
    "FeedbackResult",
    "FeedbackStatus",
    "NullTelemetryBuffer",
    "RecordStorage",
    "ResolutionRecord",
    "TelemetryBuffer",
    "Tier",
    "TierSummary",
]
