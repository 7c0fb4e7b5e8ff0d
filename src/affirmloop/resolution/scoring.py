"""Keyword overlap scoring for template matching."""

from abc import ABC, abstractmethod
from collections.abc import Set


class OverlapScorer(ABC):
    """Scores how well two keyword sets overlap, from 0.0 to 1.0."""

    @abstractmethod
    def score(self, request: Set[str], candidate: Set[str]) -> float:
        """Return the overlap score between request and candidate keywords."""
        pass


class JaccardScorer(OverlapScorer):
    """Size of the intersection over size of the union."""

    def score(self, request: Set[str], candidate: Set[str]) -> float:
        union = request | candidate
        if not union:
            return 0.0
        return len(request & candidate) / len(union)
