"""SQLite storage for resolution records."""

import json
import logging
import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

from ..db import get_connection, transaction
from ..library.models import Goal
from .models import ResolutionRecord, Tier, TierSummary

logger = logging.getLogger(__name__)


def _row_to_record(row: sqlite3.Row) -> ResolutionRecord:
    return ResolutionRecord(
        id=row["id"],
        tier=Tier(row["tier"]),
        cost=row["cost"],
        confidence=row["confidence"],
        goal=Goal(row["goal"]),
        intent=row["intent"],
        is_first_session=bool(row["is_first_session"]),
        line_ids=tuple(json.loads(row["line_ids"])),
        template_id=row["template_id"],
        rating=row["rating"],
        was_replayed=None if row["was_replayed"] is None else bool(row["was_replayed"]),
        feedback_at=(
            datetime.fromisoformat(row["feedback_at"]) if row["feedback_at"] else None
        ),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class RecordStorage:
    """SQLite-backed log of resolution records.

    The table is the source of truth for cost reporting and feedback;
    the in-memory telemetry buffer only mirrors it.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema with tables and indexes."""
        with transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resolution_record (
                    id TEXT PRIMARY KEY,
                    tier TEXT NOT NULL,
                    cost REAL NOT NULL,
                    confidence REAL NOT NULL,
                    goal TEXT NOT NULL,
                    intent TEXT NOT NULL,
                    is_first_session INTEGER NOT NULL,
                    template_id TEXT,
                    line_ids TEXT NOT NULL,
                    rating INTEGER,
                    was_replayed INTEGER,
                    feedback_at TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_record_created
                ON resolution_record(created_at)
            """)

    def insert(self, record: ResolutionRecord) -> None:
        """Persist a new resolution record."""
        with transaction(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO resolution_record
                    (id, tier, cost, confidence, goal, intent, is_first_session,
                     template_id, line_ids, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    record.id,
                    record.tier.value,
                    record.cost,
                    record.confidence,
                    record.goal.value,
                    record.intent,
                    int(record.is_first_session),
                    record.template_id,
                    json.dumps(list(record.line_ids)),
                    record.created_at.isoformat(),
                ),
            )
        logger.debug(f"Recorded resolution {record.id} ({record.tier.value})")

    def get(self, record_id: str) -> ResolutionRecord | None:
        """Retrieve a record by id."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM resolution_record WHERE id = ?", (record_id,)
            ).fetchone()
        finally:
            conn.close()
        return _row_to_record(row) if row else None

    def submit_feedback(
        self,
        record_id: str,
        rating: int | None,
        was_replayed: bool | None,
        conn: sqlite3.Connection,
    ) -> bool:
        """Write feedback fields if none were written before.

        Runs on the caller's connection so rating side effects can share
        the same transaction.

        Returns:
            True if this call wrote the feedback, False if feedback existed
        """
        cursor = conn.execute(
            """
            UPDATE resolution_record
            SET rating = ?, was_replayed = ?, feedback_at = ?
            WHERE id = ? AND feedback_at IS NULL
        """,
            (
                rating,
                None if was_replayed is None else int(was_replayed),
                datetime.now().isoformat(),
                record_id,
            ),
        )
        return cursor.rowcount > 0

    def cost_summary(self, days: int = 7) -> list[TierSummary]:
        """Per-tier request count, cost and feedback over the last N days."""
        since = (datetime.now() - timedelta(days=days)).isoformat()
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                """
                SELECT tier,
                       COUNT(*) AS requests,
                       SUM(cost) AS total_cost,
                       AVG(cost) AS avg_cost,
                       AVG(rating) AS avg_rating,
                       SUM(CASE WHEN was_replayed = 1 THEN 1 ELSE 0 END) AS replays
                FROM resolution_record
                WHERE created_at >= ?
                GROUP BY tier
                ORDER BY tier
            """,
                (since,),
            ).fetchall()
        finally:
            conn.close()

        return [
            TierSummary(
                tier=Tier(row["tier"]),
                requests=row["requests"],
                total_cost=row["total_cost"],
                avg_cost=row["avg_cost"],
                avg_rating=row["avg_rating"],
                replays=row["replays"],
            )
            for row in rows
        ]
