"""Tier 2: assemble a session from the shared line pool."""

import logging

from ..library.models import Line
from ..library.storage import LibraryStorage
from .models import PoolMatch
from .normalizer import NormalizedIntent

logger = logging.getLogger(__name__)

OVERLAP_WEIGHT = 0.7
RATING_WEIGHT = 0.3
NEUTRAL_RATING = 0.5


def _rating_norm(line: Line) -> float:
    """Average rating mapped from 1..5 onto 0..1, neutral when unrated."""
    if line.avg_rating is None:
        return NEUTRAL_RATING
    return (line.avg_rating - 1.0) / 4.0


class PoolResolver:
    """Picks theme-matching, diverse lines from the pool.

    Only themes other than the goal count, since every line of a goal
    already carries the goal tag.
    """

    def __init__(
        self, library: LibraryStorage, line_count: int = 6, min_viable: int = 3
    ) -> None:
        self.library = library
        self.line_count = line_count
        self.min_viable = min_viable

    def find(self, intent: NormalizedIntent) -> PoolMatch | None:
        """Best pooled assembly for the intent, or None."""
        specific = intent.specific_themes
        if not specific:
            return None

        eligible = self.library.find_lines_by_tags(intent.goal, specific)
        if len(eligible) < self.min_viable:
            logger.debug(
                f"Only {len(eligible)} pooled lines match themes {sorted(specific)}"
            )
            return None

        overlaps = {
            line.id: len(line.tag_set & specific) / len(specific) for line in eligible
        }
        ranked = sorted(
            eligible,
            key=lambda line: (
                -(OVERLAP_WEIGHT * overlaps[line.id] + RATING_WEIGHT * _rating_norm(line)),
                -line.use_count,
                line.id,
            ),
        )

        selected: list[Line] = []
        seen_tag_sets: set[frozenset[str]] = set()
        for line in ranked:
            if line.tag_set in seen_tag_sets:
                continue
            selected.append(line)
            seen_tag_sets.add(line.tag_set)
            if len(selected) == self.line_count:
                break

        if len(selected) < self.min_viable:
            logger.debug(f"Only {len(selected)} diverse lines after filtering")
            return None

        mean_overlap = sum(overlaps[line.id] for line in selected) / len(selected)
        confidence = mean_overlap * min(1.0, len(selected) / self.line_count)
        logger.debug(
            f"Pooled candidate of {len(selected)} lines, confidence {confidence:.2f}"
        )
        return PoolMatch(lines=tuple(selected), confidence=confidence)

    def accept(self, match: PoolMatch) -> None:
        """Count one use of every selected line."""
        self.library.increment_line_use(line.id for line in match.lines)
        logger.info(f"Assembled session from {len(match.lines)} pooled lines")
