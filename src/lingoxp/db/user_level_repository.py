"""Repository functions for the user_levels table.

Every write loads the row, applies a lingoxp.core.user_level mutation and
stores it back inside one BEGIN IMMEDIATE transaction.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any, TypeVar

import structlog

from lingoxp.core import user_level as domain
from lingoxp.core.progress_calculator import SkillSnapshot
from lingoxp.core.user_level import UserLevel, XPApplication
from lingoxp.db.database import get_db

logger = structlog.get_logger(__name__)

T = TypeVar("T")

LEADERBOARD_SORT_FIELDS = {
    "total_xp": "total_xp",
    "totalXP": "total_xp",
    "level": "level",
    "streak": "streak",
}

_COLUMNS = (
    "user_id",
    "user_name",
    "user_email",
    "level",
    "current_xp",
    "total_xp",
    "xp_to_next_level",
    "streak",
    "longest_streak",
    "total_sessions",
    "last_session_date",
    "accuracy",
    "vocabulary",
    "grammar",
    "pronunciation",
    "fluency",
    "achievements",
    "created_at",
    "updated_at",
)


class UserLevelNotFoundError(Exception):
    """Raised when no level record exists for a user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User level not found for '{user_id}'")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def _to_params(record: UserLevel) -> tuple[Any, ...]:
    values = []
    for column in _COLUMNS:
        value = getattr(record, column)
        if column == "achievements":
            value = json.dumps(value)
        values.append(value)
    return tuple(values)


def _fetch(conn: sqlite3.Connection, user_id: str) -> UserLevel | None:
    row = conn.execute(
        "SELECT * FROM user_levels WHERE user_id = ?", (user_id,)
    ).fetchone()
    if row is None:
        return None
    return UserLevel.from_row(row)


def _store(conn: sqlite3.Connection, record: UserLevel) -> None:
    placeholders = ", ".join("?" for _ in _COLUMNS)
    conn.execute(
        f"INSERT OR REPLACE INTO user_levels ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
        _to_params(record),
    )


def _update(user_id: str, mutate: Callable[[UserLevel], T]) -> tuple[UserLevel, T]:
    """Load, mutate and save a record atomically."""
    with get_db(immediate=True) as conn:
        record = _fetch(conn, user_id)
        if record is None:
            raise UserLevelNotFoundError(user_id)
        result = mutate(record)
        _store(conn, record)
    return record, result


# =============================================================================
# QUERIES
# =============================================================================


def get_user_level(user_id: str) -> UserLevel:
    """Get the level record of a user.

    Raises:
        UserLevelNotFoundError: If the user has no record
    """
    with get_db() as conn:
        record = _fetch(conn, user_id)

    if record is None:
        raise UserLevelNotFoundError(user_id)
    return record


def get_leaderboard(limit: int = 10, sort_by: str = "total_xp") -> list[UserLevel]:
    """Top records ordered by total_xp, level or streak (descending).

    Unknown sort fields fall back to total_xp.
    """
    column = LEADERBOARD_SORT_FIELDS.get(sort_by, "total_xp")
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM user_levels ORDER BY {column} DESC, total_xp DESC, user_id ASC LIMIT ?",
            (limit,),
        ).fetchall()
    return [UserLevel.from_row(row) for row in rows]


# =============================================================================
# COMMANDS
# =============================================================================


def initialize_user_level(
    user_id: str,
    user_name: str | None = None,
    user_email: str | None = None,
) -> tuple[UserLevel, bool]:
    """Create a record, or refresh name/email of an existing one.

    Returns:
        (record, created)
    """
    with get_db(immediate=True) as conn:
        record = _fetch(conn, user_id)
        created = record is None

        if created:
            record = UserLevel.new(user_id, user_name, user_email)
        else:
            if user_name:
                record.user_name = user_name
            if user_email:
                record.user_email = user_email

        _store(conn, record)

    logger.info("user_level.initialized", user_id=user_id, created=created)
    return record, created


def add_xp(user_id: str, amount: int, reason: str | None = None) -> tuple[UserLevel, XPApplication]:
    """Add XP to a user and persist the new level."""
    record, applied = _update(user_id, lambda r: domain.apply_xp(r, amount))

    logger.info(
        "user_level.xp_added",
        user_id=user_id,
        xp=amount,
        reason=reason or "unknown",
        leveled_up=applied.leveled_up,
        level=applied.new_level,
    )
    return record, applied


def record_session(user_id: str, today: date | None = None) -> UserLevel:
    """Count a session and update the streak."""
    record, _ = _update(user_id, lambda r: domain.apply_session(r, today))
    logger.debug("user_level.session_recorded", user_id=user_id, streak=record.streak)
    return record


def update_skills(user_id: str, skills: SkillSnapshot | Mapping[str, Any]) -> UserLevel:
    """Overwrite the provided skill scores."""
    record, _ = _update(user_id, lambda r: domain.apply_skills(r, skills))
    logger.debug("user_level.skills_updated", user_id=user_id)
    return record


def apply_progress(
    user_id: str,
    xp_amount: int,
    skills: SkillSnapshot | Mapping[str, Any] | None = None,
) -> tuple[UserLevel, XPApplication]:
    """Add XP and update skills in a single transaction."""

    def mutate(record: UserLevel) -> XPApplication:
        applied = domain.apply_xp(record, xp_amount)
        if skills:
            domain.apply_skills(record, skills)
        return applied

    record, applied = _update(user_id, mutate)
    logger.info(
        "user_level.progress_updated",
        user_id=user_id,
        xp=xp_amount,
        leveled_up=applied.leveled_up,
    )
    return record, applied


def add_achievement(user_id: str, achievement: str) -> tuple[UserLevel, bool]:
    """Append an achievement if missing. Returns (record, added)."""
    record, added = _update(user_id, lambda r: domain.add_achievement(r, achievement))
    if added:
        logger.info("user_level.achievement_added", user_id=user_id, achievement=achievement)
    return record, added
