"""Tier 1: reuse a pre-built template verbatim."""

import logging

from ..errors import DataIntegrityError
from ..library.storage import LibraryStorage
from .models import TemplateMatch
from .normalizer import NormalizedIntent
from .scoring import JaccardScorer, OverlapScorer

logger = logging.getLogger(__name__)


class TemplateResolver:
    """Finds the template whose keywords best overlap the intent."""

    def __init__(
        self, library: LibraryStorage, scorer: OverlapScorer | None = None
    ) -> None:
        self.library = library
        self.scorer = scorer or JaccardScorer()

    def find(self, intent: NormalizedIntent) -> TemplateMatch | None:
        """Best template of the intent's goal, or None.

        Ties on confidence go to the most used template, then the lowest id.

        Raises:
            DataIntegrityError: If the best template references a missing line
        """
        if not intent.keywords:
            return None

        scored = [
            (self.scorer.score(intent.keywords, template.keywords), template)
            for template in self.library.templates_for_goal(intent.goal)
        ]
        if not scored:
            return None

        best_confidence, best = min(
            scored, key=lambda item: (-item[0], -item[1].use_count, item[1].id)
        )

        lines = self.library.get_lines(best.line_ids)
        missing = [line_id for line_id in best.line_ids if line_id not in lines]
        if missing:
            raise DataIntegrityError(
                f"Template {best.id} references missing lines: {', '.join(missing)}"
            )

        logger.debug(f"Best template {best.id} with confidence {best_confidence:.2f}")
        return TemplateMatch(
            template=best,
            confidence=best_confidence,
            lines=tuple(lines[line_id] for line_id in best.line_ids),
        )

    def accept(self, match: TemplateMatch) -> None:
        """Count one use of the matched template."""
        self.library.increment_template_use(match.template.id)
        logger.info(f"Using template {match.template.id} ({match.template.title})")
