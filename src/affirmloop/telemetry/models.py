"""Data models for resolution records and feedback."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..library.models import Goal


class Tier(str, Enum):
    """Which resolution tier served a session."""

    EXACT = "exact"
    POOLED = "pooled"
    GENERATED = "generated"
    FALLBACK = "fallback"


class FeedbackStatus(str, Enum):
    """Outcome of a feedback submission."""

    RECORDED = "recorded"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ResolutionRecord:
    """Immutable log entry for one resolution.

    Only the feedback fields (rating, was_replayed, feedback_at) are ever
    written after creation, and only once.
    """

    id: str
    tier: Tier
    cost: float
    confidence: float
    goal: Goal
    intent: str
    is_first_session: bool
    line_ids: tuple[str, ...]
    template_id: str | None = None
    rating: int | None = None
    was_replayed: bool | None = None
    feedback_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def has_feedback(self) -> bool:
        return self.feedback_at is not None


@dataclass(frozen=True)
class FeedbackResult:
    """Result of a feedback submission."""

    record_id: str
    status: FeedbackStatus
    lines_updated: int = 0
    template_updated: bool = False


@dataclass(frozen=True)
class TierSummary:
    """Aggregated cost and feedback for one tier over a period."""

    tier: Tier
    requests: int
    total_cost: float
    avg_cost: float
    avg_rating: float | None
    replays: int
