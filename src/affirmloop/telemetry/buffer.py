"""Bounded in-memory mirror of recent resolution records."""

import logging
from collections import deque

from .models import ResolutionRecord, Tier

logger = logging.getLogger(__name__)


class TelemetryBuffer:
    """FIFO of the most recent resolution records.

    Created alongside the engine and passed in explicitly. When full, the
    oldest entry is evicted.
    """

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._records: deque[ResolutionRecord] = deque(maxlen=max_size)

    def append(self, record: ResolutionRecord) -> None:
        self._records.append(record)

    def recent(self, limit: int | None = None) -> list[ResolutionRecord]:
        """Records newest first."""
        records = list(reversed(self._records))
        return records if limit is None else records[:limit]

    def tier_counts(self) -> dict[Tier, int]:
        counts = {tier: 0 for tier in Tier}
        for record in self._records:
            counts[record.tier] += 1
        return counts

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class NullTelemetryBuffer(TelemetryBuffer):
    """Buffer that discards everything."""

    def __init__(self) -> None:
        super().__init__(max_size=1)

    def append(self, record: ResolutionRecord) -> None:
        pass
