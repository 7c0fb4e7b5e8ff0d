"""Feedback recording and rating propagation."""

import logging

from ..db import transaction
from ..errors import RecordNotFoundError
from ..library.storage import LibraryStorage
from .models import FeedbackResult, FeedbackStatus, Tier
from .storage import RecordStorage

logger = logging.getLogger(__name__)

POSITIVE_RATING = 4


class FeedbackRecorder:
    """Write-once feedback on resolution records.

    A positive rating (4 or 5) is folded into the running averages of the
    lines of a pooled resolution, or of the template of an exact one.
    Lower ratings are stored on the record only.
    """

    def __init__(self, records: RecordStorage, library: LibraryStorage) -> None:
        self.records = records
        self.library = library

    def record_feedback(
        self,
        record_id: str,
        rating: int | None = None,
        was_replayed: bool | None = None,
    ) -> FeedbackResult:
        """Attach feedback to a resolution record.

        Args:
            record_id: Id returned by a resolution
            rating: Optional rating from 1 to 5
            was_replayed: Optional flag for whether the session was replayed

        Returns:
            FeedbackResult with RECORDED, or DUPLICATE if feedback was
            already submitted for this record

        Raises:
            ValueError: If the rating is out of range or nothing is given
            RecordNotFoundError: If no record has this id
        """
        if rating is None and was_replayed is None:
            raise ValueError("Feedback needs a rating or a replay flag")
        if rating is not None and (
            isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5
        ):
            raise ValueError(f"Rating must be an integer from 1 to 5, got {rating!r}")

        record = self.records.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Resolution record not found: {record_id}")

        lines_updated = 0
        template_updated = False
        with transaction(self.records.db_path) as conn:
            written = self.records.submit_feedback(
                record_id, rating, was_replayed, conn
            )
            if not written:
                logger.warning(f"Duplicate feedback ignored for record {record_id}")
                return FeedbackResult(record_id, FeedbackStatus.DUPLICATE)

            if rating is not None and rating >= POSITIVE_RATING:
                if record.tier is Tier.POOLED:
                    lines_updated = self.library.apply_line_rating(
                        record.line_ids, rating, conn
                    )
                elif record.tier is Tier.EXACT and record.template_id:
                    template_updated = self.library.apply_template_rating(
                        record.template_id, rating, conn
                    )

        logger.info(
            f"Feedback recorded for {record_id}: rating={rating}, "
            f"replayed={was_replayed}"
        )
        return FeedbackResult(
            record_id,
            FeedbackStatus.RECORDED,
            lines_updated=lines_updated,
            template_updated=template_updated,
        )
