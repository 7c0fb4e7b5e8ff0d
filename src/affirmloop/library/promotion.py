"""Promotion of well-rated pooled resolutions into templates."""

import logging
import uuid

from ..errors import RecordNotFoundError
from ..resolution.normalizer import extract_keywords
from ..telemetry.models import Tier
from ..telemetry.storage import RecordStorage
from .models import Template
from .storage import LibraryStorage

logger = logging.getLogger(__name__)

MIN_PROMOTION_RATING = 4


def promote_record(
    library: LibraryStorage,
    records: RecordStorage,
    record_id: str,
    title: str,
) -> Template:
    """Turn a pooled resolution rated 4 or higher into a new template.

    The template keeps the record's line order and takes its keywords
    from the record's intent. Promoted templates are not protected.

    Raises:
        RecordNotFoundError: If no record has this id
        ValueError: If the record is not a well-rated pooled resolution
    """
    record = records.get(record_id)
    if record is None:
        raise RecordNotFoundError(f"Resolution record not found: {record_id}")
    if record.tier is not Tier.POOLED:
        raise ValueError(
            f"Only pooled resolutions can be promoted, record is {record.tier.value}"
        )
    if record.rating is None or record.rating < MIN_PROMOTION_RATING:
        raise ValueError(
            f"Record must be rated at least {MIN_PROMOTION_RATING} to be promoted"
        )
    if not title.strip():
        raise ValueError("Template title cannot be empty")

    template = Template(
        id=f"promoted-{uuid.uuid4().hex[:12]}",
        title=title.strip(),
        goal=record.goal,
        intent=record.intent,
        keywords=extract_keywords(record.intent),
        line_ids=record.line_ids,
    )
    library.save_template(template)
    logger.info(f"Promoted record {record_id} to template {template.id}")
    return template
