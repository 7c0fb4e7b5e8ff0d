"""Tiered affirmation resolution."""

from .models import (
    ExactOutcome,
    FallbackOutcome,
    GeneratedOutcome,
    Outcome,
    PooledOutcome,
    PoolMatch,
    ResolutionResult,
    TemplateMatch,
)
from .normalizer import NormalizedIntent, normalize

__all__ = [
    "ExactOutcome",
    "FallbackOutcome",
    "GeneratedOutcome",
    "NormalizedIntent",
    "Outcome",
    "PoolMatch",
    "PooledOutcome",
    "ResolutionResult",
    "TemplateMatch",
    "normalize",
]
