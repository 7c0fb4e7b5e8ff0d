"""SQLite connection management shared by all storage classes."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Get a new database connection with WAL mode for concurrency.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Connection with row factory, foreign keys and WAL journaling enabled
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(
        str(db_path),
        timeout=30.0,  # 30 second timeout if locked
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=30000")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def transaction(
    db_path: Path, conn: sqlite3.Connection | None = None
) -> Generator[sqlite3.Connection, None, None]:
    """Open a connection, commit on success, roll back on error, always close.

    If an open connection is passed, it is yielded as-is and the caller
    owns its transaction.
    """
    if conn is not None:
        yield conn
        return

    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
