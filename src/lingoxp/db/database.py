"""SQLite database connection and schema management.

Provides connection management and schema initialization for user level records.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/lingoxp.db")

# Current database path (module-level, set by init_db)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/lingoxp.db

    Returns:
        Path of the initialized database
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))
    return _db_path


def get_db_path() -> Path:
    """Path used by get_db()."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db(immediate: bool = False) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Args:
        immediate: Take the write lock up front (BEGIN IMMEDIATE), so a
            read-modify-write sequence cannot interleave with another writer.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM user_levels").fetchall()
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=10.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        if immediate:
            conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- level, current_xp and xp_to_next_level are derived from total_xp
        CREATE TABLE IF NOT EXISTS user_levels (
            user_id TEXT PRIMARY KEY,
            user_name TEXT NOT NULL DEFAULT 'User',
            user_email TEXT NOT NULL DEFAULT '',
            level INTEGER NOT NULL DEFAULT 1 CHECK(level >= 1),
            current_xp INTEGER NOT NULL DEFAULT 0 CHECK(current_xp >= 0),
            total_xp INTEGER NOT NULL DEFAULT 0 CHECK(total_xp >= 0),
            xp_to_next_level INTEGER NOT NULL DEFAULT 500 CHECK(xp_to_next_level >= 0),
            streak INTEGER NOT NULL DEFAULT 0 CHECK(streak >= 0),
            longest_streak INTEGER NOT NULL DEFAULT 0 CHECK(longest_streak >= 0),
            total_sessions INTEGER NOT NULL DEFAULT 0 CHECK(total_sessions >= 0),
            last_session_date TEXT,
            accuracy REAL NOT NULL DEFAULT 0 CHECK(accuracy BETWEEN 0 AND 100),
            vocabulary REAL NOT NULL DEFAULT 0 CHECK(vocabulary BETWEEN 0 AND 100),
            grammar REAL NOT NULL DEFAULT 0 CHECK(grammar BETWEEN 0 AND 100),
            pronunciation REAL NOT NULL DEFAULT 0 CHECK(pronunciation BETWEEN 0 AND 100),
            fluency REAL NOT NULL DEFAULT 0 CHECK(fluency BETWEEN 0 AND 100),
            achievements TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_user_levels_total_xp ON user_levels(total_xp DESC);
        CREATE INDEX IF NOT EXISTS idx_user_levels_level ON user_levels(level DESC);
        CREATE INDEX IF NOT EXISTS idx_user_levels_streak ON user_levels(streak DESC);
        """
    )
