"""Candidate and result types for tiered resolution."""

from dataclasses import dataclass

from ..library.models import Line, Template
from ..telemetry.models import Tier


@dataclass(frozen=True)
class TemplateMatch:
    """Best Tier 1 candidate: a template and its lines in order."""

    template: Template
    confidence: float
    lines: tuple[Line, ...]


@dataclass(frozen=True)
class PoolMatch:
    """Best Tier 2 candidate: a diverse selection from the pool."""

    lines: tuple[Line, ...]
    confidence: float


@dataclass(frozen=True)
class ExactOutcome:
    template_id: str

    tier = Tier.EXACT


@dataclass(frozen=True)
class PooledOutcome:
    line_ids: tuple[str, ...]
    confidence: float

    tier = Tier.POOLED


@dataclass(frozen=True)
class GeneratedOutcome:
    line_ids: tuple[str, ...]

    tier = Tier.GENERATED


@dataclass(frozen=True)
class FallbackOutcome:
    static_ids: tuple[str, ...]

    tier = Tier.FALLBACK


Outcome = ExactOutcome | PooledOutcome | GeneratedOutcome | FallbackOutcome


@dataclass(frozen=True)
class ResolutionResult:
    """What a resolution hands back to the caller.

    Attributes:
        record_id: Id of the resolution record, used for feedback
        lines: Affirmation texts in delivery order
        outcome: Which tier served the session and what it referenced
        confidence: Confidence at decision time, 0 for generated and fallback
        cost: Attributed cost of the tier
    """

    record_id: str
    lines: tuple[str, ...]
    outcome: Outcome
    confidence: float
    cost: float

    @property
    def tier(self) -> Tier:
        return self.outcome.tier
