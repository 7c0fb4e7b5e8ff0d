"""SQLite storage for affirmation lines and session templates."""

import json
import logging
import sqlite3
import uuid
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from ..db import get_connection, transaction
from ..errors import LineInUseError, ProtectedTemplateError
from .models import Goal, Line, Template

logger = logging.getLogger(__name__)


def _placeholders(count: int) -> str:
    return ", ".join("?" * count)


def _row_to_line(row: sqlite3.Row) -> Line:
    return Line(
        id=row["id"],
        text=row["text"],
        goal=Goal(row["goal"]),
        tags=frozenset(json.loads(row["tags"])),
        emotion=row["emotion"],
        use_count=row["use_count"],
        avg_rating=row["avg_rating"],
        positive_ratings=row["positive_ratings"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_template(row: sqlite3.Row, line_ids: tuple[str, ...]) -> Template:
    return Template(
        id=row["id"],
        title=row["title"],
        goal=Goal(row["goal"]),
        intent=row["intent"],
        keywords=frozenset(json.loads(row["keywords"])),
        line_ids=line_ids,
        use_count=row["use_count"],
        avg_rating=row["avg_rating"],
        positive_ratings=row["positive_ratings"],
        is_protected=bool(row["is_protected"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class LibraryStorage:
    """SQLite-backed pool of lines and catalog of templates.

    Lines are unique per (text, goal). Templates reference lines through
    an ordered join table, so a referenced line cannot be removed.
    """

    def __init__(self, db_path: Path):
        """Initialize library storage, creating the schema if needed.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema with tables and indexes."""
        with transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS affirmation_line (
                    id TEXT PRIMARY KEY,
                    text TEXT NOT NULL,
                    goal TEXT NOT NULL,
                    tags TEXT NOT NULL,
                    emotion TEXT NOT NULL,
                    use_count INTEGER NOT NULL DEFAULT 0,
                    avg_rating REAL,
                    positive_ratings INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    UNIQUE(text, goal)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_line_goal
                ON affirmation_line(goal)
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS session_template (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    goal TEXT NOT NULL,
                    intent TEXT NOT NULL,
                    keywords TEXT NOT NULL,
                    use_count INTEGER NOT NULL DEFAULT 0,
                    avg_rating REAL,
                    positive_ratings INTEGER NOT NULL DEFAULT 0,
                    is_protected INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS template_line (
                    template_id TEXT NOT NULL
                        REFERENCES session_template(id) ON DELETE CASCADE,
                    line_id TEXT NOT NULL REFERENCES affirmation_line(id),
                    position INTEGER NOT NULL,
                    PRIMARY KEY (template_id, position)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_template_line_line
                ON template_line(line_id)
            """)

    # === LINES ===

    def add_generated_line(
        self, text: str, goal: Goal, tags: Iterable[str], emotion: str
    ) -> tuple[str, bool]:
        """Insert a generated line, or bump the use count of its twin.

        A single upsert statement against the UNIQUE(text, goal) constraint,
        so concurrent identical inserts always converge on one row.

        Returns:
            Tuple of (line id, True if a new row was created)
        """
        new_id = uuid.uuid4().hex
        with transaction(self.db_path) as conn:
            row = conn.execute(
                """
                INSERT INTO affirmation_line
                    (id, text, goal, tags, emotion, use_count, created_at)
                VALUES (?, ?, ?, ?, ?, 1, ?)
                ON CONFLICT(text, goal) DO UPDATE SET use_count = use_count + 1
                RETURNING id
            """,
                (
                    new_id,
                    text,
                    Goal(goal).value,
                    json.dumps(sorted(set(tags))),
                    emotion,
                    datetime.now().isoformat(),
                ),
            ).fetchone()

        line_id = row["id"]
        created = line_id == new_id
        if not created:
            logger.debug(f"Line already pooled, reused {line_id}: '{text[:50]}'")
        return line_id, created

    def ensure_seed_line(
        self, text: str, goal: Goal, tags: Iterable[str], emotion: str
    ) -> tuple[str, bool]:
        """Insert an authored line, refreshing tags if it already exists.

        Returns:
            Tuple of (line id, True if a new row was created)
        """
        new_id = uuid.uuid4().hex
        with transaction(self.db_path) as conn:
            row = conn.execute(
                """
                INSERT INTO affirmation_line
                    (id, text, goal, tags, emotion, use_count, created_at)
                VALUES (?, ?, ?, ?, ?, 0, ?)
                ON CONFLICT(text, goal) DO UPDATE SET
                    tags = excluded.tags,
                    emotion = excluded.emotion
                RETURNING id
            """,
                (
                    new_id,
                    text,
                    Goal(goal).value,
                    json.dumps(sorted(set(tags))),
                    emotion,
                    datetime.now().isoformat(),
                ),
            ).fetchone()
        return row["id"], row["id"] == new_id

    def get_line(self, line_id: str) -> Line | None:
        """Retrieve a single line by id."""
        return self.get_lines([line_id]).get(line_id)

    def get_lines(self, line_ids: Iterable[str]) -> dict[str, Line]:
        """Retrieve lines by id.

        Returns:
            Mapping of id to Line for every id that exists
        """
        ids = list(dict.fromkeys(line_ids))
        if not ids:
            return {}

        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT * FROM affirmation_line WHERE id IN ({_placeholders(len(ids))})",
                ids,
            ).fetchall()
        finally:
            conn.close()
        return {row["id"]: _row_to_line(row) for row in rows}

    def find_lines_by_tags(self, goal: Goal, tags: Iterable[str]) -> list[Line]:
        """Lines of a goal whose tags or emotion intersect the given tags."""
        wanted = sorted(set(tags))
        if not wanted:
            return []

        marks = _placeholders(len(wanted))
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                f"""
                SELECT * FROM affirmation_line
                WHERE goal = ?
                AND (
                    emotion IN ({marks})
                    OR EXISTS (
                        SELECT 1 FROM json_each(affirmation_line.tags)
                        WHERE json_each.value IN ({marks})
                    )
                )
            """,
                [Goal(goal).value, *wanted, *wanted],
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_line(row) for row in rows]

    def find_line(self, text: str, goal: Goal) -> Line | None:
        """Look up a line by its exact text within a goal."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM affirmation_line WHERE text = ? AND goal = ?",
                (text, Goal(goal).value),
            ).fetchone()
        finally:
            conn.close()
        return _row_to_line(row) if row else None

    def increment_line_use(self, line_ids: Iterable[str]) -> None:
        """Add one use to each of the given lines."""
        ids = list(dict.fromkeys(line_ids))
        if not ids:
            return
        with transaction(self.db_path) as conn:
            conn.execute(
                f"""
                UPDATE affirmation_line SET use_count = use_count + 1
                WHERE id IN ({_placeholders(len(ids))})
            """,
                ids,
            )

    def apply_line_rating(
        self,
        line_ids: Iterable[str],
        rating: int,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        """Fold a positive rating into each line's running average.

        The existing average is weighted by the line's use count.

        Returns:
            Number of lines updated
        """
        ids = list(dict.fromkeys(line_ids))
        if not ids:
            return 0
        with transaction(self.db_path, conn) as conn:
            cursor = conn.execute(
                f"""
                UPDATE affirmation_line SET
                    avg_rating = CASE
                        WHEN avg_rating IS NULL THEN ?
                        ELSE (avg_rating * use_count + ?) / (use_count + 1.0)
                    END,
                    positive_ratings = positive_ratings + 1
                WHERE id IN ({_placeholders(len(ids))})
            """,
                [rating, rating, *ids],
            )
        return cursor.rowcount

    def delete_line(self, line_id: str) -> bool:
        """Administratively delete a line.

        Returns:
            True if a line was deleted, False if it did not exist

        Raises:
            LineInUseError: If any template references the line
        """
        with transaction(self.db_path) as conn:
            referenced = conn.execute(
                "SELECT template_id FROM template_line WHERE line_id = ? LIMIT 1",
                (line_id,),
            ).fetchone()
            if referenced is not None:
                raise LineInUseError(
                    f"Line {line_id} is referenced by template "
                    f"{referenced['template_id']}"
                )
            cursor = conn.execute(
                "DELETE FROM affirmation_line WHERE id = ?", (line_id,)
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted line {line_id}")
        return deleted

    def count_lines(self, goal: Goal | None = None) -> int:
        """Number of pooled lines, optionally within one goal."""
        conn = get_connection(self.db_path)
        try:
            if goal is None:
                row = conn.execute("SELECT COUNT(*) FROM affirmation_line").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) FROM affirmation_line WHERE goal = ?",
                    (Goal(goal).value,),
                ).fetchone()
        finally:
            conn.close()
        return row[0]

    # === TEMPLATES ===

    def _load_line_ids(
        self, conn: sqlite3.Connection, template_ids: list[str]
    ) -> dict[str, tuple[str, ...]]:
        if not template_ids:
            return {}
        rows = conn.execute(
            f"""
            SELECT template_id, line_id FROM template_line
            WHERE template_id IN ({_placeholders(len(template_ids))})
            ORDER BY template_id, position
        """,
            template_ids,
        ).fetchall()
        grouped: dict[str, list[str]] = {tid: [] for tid in template_ids}
        for row in rows:
            grouped[row["template_id"]].append(row["line_id"])
        return {tid: tuple(ids) for tid, ids in grouped.items()}

    def templates_for_goal(self, goal: Goal) -> list[Template]:
        """All templates bound to a goal."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT * FROM session_template WHERE goal = ? ORDER BY id",
                (Goal(goal).value,),
            ).fetchall()
            line_ids = self._load_line_ids(conn, [row["id"] for row in rows])
        finally:
            conn.close()
        return [_row_to_template(row, line_ids[row["id"]]) for row in rows]

    def get_template(self, template_id: str) -> Template | None:
        """Retrieve a template by id."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM session_template WHERE id = ?", (template_id,)
            ).fetchone()
            if row is None:
                return None
            line_ids = self._load_line_ids(conn, [template_id])
        finally:
            conn.close()
        return _row_to_template(row, line_ids[template_id])

    def save_template(self, template: Template) -> None:
        """Insert a template or refresh an existing one with the same id.

        Refreshing replaces title, intent, keywords and the line list but
        keeps counters and ratings.

        Raises:
            sqlite3.IntegrityError: If a referenced line does not exist
        """
        with transaction(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO session_template
                    (id, title, goal, intent, keywords, use_count, avg_rating,
                     positive_ratings, is_protected, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    intent = excluded.intent,
                    keywords = excluded.keywords,
                    is_protected = excluded.is_protected
            """,
                (
                    template.id,
                    template.title,
                    Goal(template.goal).value,
                    template.intent,
                    json.dumps(sorted(template.keywords)),
                    template.use_count,
                    template.avg_rating,
                    template.positive_ratings,
                    int(template.is_protected),
                    template.created_at.isoformat(),
                ),
            )
            conn.execute(
                "DELETE FROM template_line WHERE template_id = ?", (template.id,)
            )
            conn.executemany(
                """
                INSERT INTO template_line (template_id, line_id, position)
                VALUES (?, ?, ?)
            """,
                [
                    (template.id, line_id, position)
                    for position, line_id in enumerate(template.line_ids)
                ],
            )

    def increment_template_use(self, template_id: str) -> None:
        """Add exactly one use to a template."""
        with transaction(self.db_path) as conn:
            conn.execute(
                "UPDATE session_template SET use_count = use_count + 1 WHERE id = ?",
                (template_id,),
            )

    def apply_template_rating(
        self,
        template_id: str,
        rating: int,
        conn: sqlite3.Connection | None = None,
    ) -> bool:
        """Fold a positive rating into a template's running average.

        Returns:
            True if the template exists and was updated
        """
        with transaction(self.db_path, conn) as conn:
            cursor = conn.execute(
                """
                UPDATE session_template SET
                    avg_rating = CASE
                        WHEN avg_rating IS NULL THEN ?
                        ELSE (avg_rating * use_count + ?) / (use_count + 1.0)
                    END,
                    positive_ratings = positive_ratings + 1
                WHERE id = ?
            """,
                (rating, rating, template_id),
            )
        return cursor.rowcount > 0

    def delete_template(self, template_id: str) -> bool:
        """Administratively delete a template. Its lines stay in the pool.

        Returns:
            True if a template was deleted, False if it did not exist

        Raises:
            ProtectedTemplateError: If the template is a protected seed template
        """
        with transaction(self.db_path) as conn:
            row = conn.execute(
                "SELECT is_protected FROM session_template WHERE id = ?",
                (template_id,),
            ).fetchone()
            if row is None:
                return False
            if row["is_protected"]:
                raise ProtectedTemplateError(
                    f"Template {template_id} is protected and cannot be deleted"
                )
            conn.execute("DELETE FROM session_template WHERE id = ?", (template_id,))
        logger.info(f"Deleted template {template_id}")
        return True
