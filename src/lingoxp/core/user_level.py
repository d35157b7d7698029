"""User level records.

Responsibilities:
- UserLevel dataclass (one row of user_levels)
- XP application through the progression engine
- Session counting with daily streaks
- Skill updates (clamped to 0..100) and achievements
- Stats assembly for display

Functions here mutate the record in memory; persistence lives in
lingoxp.db.user_level_repository.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from lingoxp.core.progress_calculator import (
    SKILL_NAMES,
    SkillSnapshot,
    average_skill_level,
    check_level_up,
    get_level_info,
)

SKILL_MIN = 0
SKILL_MAX = 100

# =============================================================================
# DATA CLASSES
# =============================================================================


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UserLevel:
    """Level, XP, streak and skill state of one user."""

    user_id: str
    user_name: str = "User"
    user_email: str = ""
    level: int = 1
    current_xp: int = 0
    total_xp: int = 0
    xp_to_next_level: int = 500
    streak: int = 0
    longest_streak: int = 0
    total_sessions: int = 0
    last_session_date: str | None = None
    accuracy: float = 0
    vocabulary: float = 0
    grammar: float = 0
    pronunciation: float = 0
    fluency: float = 0
    achievements: list[str] = field(default_factory=list)
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    @classmethod
    def new(cls, user_id: str, user_name: str | None = None, user_email: str | None = None) -> UserLevel:
        """Fresh level-1 record with values derived from zero XP."""
        record = cls(
            user_id=user_id,
            user_name=user_name or "User",
            user_email=user_email or "",
        )
        _sync_level(record)
        return record

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> UserLevel:
        """Build from a user_levels row."""
        data = dict(row)
        data["achievements"] = json.loads(data.get("achievements") or "[]")
        return cls(**data)

    @property
    def skills(self) -> SkillSnapshot:
        """Current skill scores."""
        return SkillSnapshot(**{name: getattr(self, name) for name in SKILL_NAMES})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "userEmail": self.user_email,
            "level": self.level,
            "currentXP": self.current_xp,
            "totalXP": self.total_xp,
            "xpToNextLevel": self.xp_to_next_level,
            "streak": self.streak,
            "longestStreak": self.longest_streak,
            "totalSessions": self.total_sessions,
            "lastSessionDate": self.last_session_date,
            "skills": {name: getattr(self, name) for name in SKILL_NAMES},
            "achievements": list(self.achievements),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class XPApplication:
    """Outcome of adding XP to a record."""

    xp_added: int
    leveled_up: bool
    previous_level: int
    new_level: int


# =============================================================================
# MUTATIONS
# =============================================================================


def _sync_level(record: UserLevel) -> None:
    info = get_level_info(record.total_xp)
    record.level = info.level
    record.current_xp = info.current_xp
    record.xp_to_next_level = info.xp_to_next_level


def apply_xp(record: UserLevel, amount: int) -> XPApplication:
    """Add XP and recompute level fields from the engine curve.

    Raises:
        ValueError: If amount is negative
    """
    if amount < 0:
        raise ValueError(f"XP amount cannot be negative, got {amount}")

    previous_level = record.level
    old_total = record.total_xp
    record.total_xp += amount
    _sync_level(record)
    record.updated_at = _now_iso()

    return XPApplication(
        xp_added=amount,
        leveled_up=check_level_up(old_total, record.total_xp),
        previous_level=previous_level,
        new_level=record.level,
    )


def apply_session(record: UserLevel, today: date | None = None) -> None:
    """Count a practice session and update the daily streak.

    Same day keeps the streak, the following day extends it, anything
    longer resets it to 1.
    """
    today = today or datetime.now(timezone.utc).date()

    last = date.fromisoformat(record.last_session_date) if record.last_session_date else None
    if last is None:
        record.streak = 1
    elif last == today:
        record.streak = max(record.streak, 1)
    elif (today - last).days == 1:
        record.streak += 1
    elif today > last:
        record.streak = 1

    if last is None or today > last:
        record.last_session_date = today.isoformat()

    record.longest_streak = max(record.longest_streak, record.streak)
    record.total_sessions += 1
    record.updated_at = _now_iso()


def clamp_skill(value: float) -> float:
    return min(SKILL_MAX, max(SKILL_MIN, value))


def apply_skills(record: UserLevel, skills: SkillSnapshot | Mapping[str, Any]) -> None:
    """Overwrite the provided skills, leaving the others untouched."""
    if not isinstance(skills, SkillSnapshot):
        skills = SkillSnapshot.from_mapping(skills)

    for name, value in skills.to_dict().items():
        setattr(record, name, clamp_skill(value))
    record.updated_at = _now_iso()


def add_achievement(record: UserLevel, achievement: str) -> bool:
    """Append an achievement. Returns False when it was already there."""
    if achievement in record.achievements:
        return False
    record.achievements.append(achievement)
    record.updated_at = _now_iso()
    return True


# =============================================================================
# STATS
# =============================================================================


def compute_stats(record: UserLevel) -> dict[str, Any]:
    """Display statistics for a record."""
    info = get_level_info(record.total_xp)
    skills = {name: getattr(record, name) for name in SKILL_NAMES}

    return {
        "level": info.level,
        "totalXP": record.total_xp,
        "currentXP": info.current_xp,
        "xpToNextLevel": info.xp_to_next_level,
        "progressPercentage": info.progress_percentage,
        "streak": record.streak,
        "longestStreak": record.longest_streak,
        "totalSessions": record.total_sessions,
        "skills": {**skills, "average": average_skill_level(skills)},
        "achievements": list(record.achievements),
    }
