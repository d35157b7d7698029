"""Progression engine: XP curve, levels and rewards.

Responsibilities:
- Level curve (XP per level, cumulative thresholds)
- Conversions between total XP and level
- XP rewards per action with contextual multipliers
- Level-up detection, skill averaging and progress summaries

Every function is pure. The reward table and multiplier rules are read-only
module constants, so the engine can be called concurrently without locking.

Usage:
    from lingoxp.core.progress_calculator import get_level_info, calculate_xp_reward

    info = get_level_info(1200)
    reward = calculate_xp_reward("daily_streak")
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, fields
from types import MappingProxyType
from typing import Any

# =============================================================================
# CONSTANTS
# =============================================================================

BASE_LEVEL_XP = 500
LEVEL_GROWTH = 1.1
DEFAULT_ACTION_XP = 5

XP_REWARDS: Mapping[str, int] = MappingProxyType(
    {
        "send_message": 10,
        "receive_response": 5,
        "complete_exercise": 25,
        "daily_streak": 15,
        "perfect_grammar": 20,
        "vocabulary_milestone": 30,
        "achievement_unlock": 50,
        "level_up_bonus": 100,
        "session_complete": 15,
        "first_message": 10,
        "long_conversation": 20,
        "quick_response": 5,
        "detailed_response": 15,
        "helpful_correction": 10,
        "consistent_practice": 25,
        "accuracy_improvement": 15,
        "vocabulary_expansion": 20,
        "grammar_mastery": 25,
        "fluency_achievement": 30,
    }
)

SKILL_NAMES = ("accuracy", "vocabulary", "grammar", "pronunciation", "fluency")


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class LevelInfo:
    """Level position derived from a total XP value."""

    level: int
    current_xp: int
    xp_to_next_level: int
    progress_percentage: int

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary using the public camelCase keys."""
        return {
            "level": self.level,
            "currentXP": self.current_xp,
            "xpToNextLevel": self.xp_to_next_level,
            "progressPercentage": self.progress_percentage,
        }


@dataclass(frozen=True)
class XPReward:
    """XP awarded for a single action."""

    total_xp: int
    reason: str
    base_xp: int
    multiplier: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary using the public camelCase keys."""
        return {
            "totalXP": self.total_xp,
            "reason": self.reason,
            "baseXP": self.base_xp,
            "multiplier": self.multiplier,
        }


@dataclass(frozen=True)
class SkillSnapshot:
    """Skill scores for a learner. Missing skills are None."""

    accuracy: float | None = None
    vocabulary: float | None = None
    grammar: float | None = None
    pronunciation: float | None = None
    fluency: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> SkillSnapshot:
        """Build a snapshot from a mapping, ignoring unknown keys."""
        if not data:
            return cls()
        return cls(**{name: data.get(name) for name in SKILL_NAMES})

    def values(self) -> list[float]:
        """Present skill values, in declaration order."""
        return [
            getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        ]

    def to_dict(self) -> dict[str, float]:
        """Only the skills that are present."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class MultiplierRule:
    """Contextual multiplier adjustment gated on the action identifier."""

    name: str
    applies: Callable[[str], bool]
    adjust: Callable[[float], float]


def _contains_any(*needles: str) -> Callable[[str], bool]:
    return lambda action: any(needle in action for needle in needles)


# Evaluated in order; each rule sees the multiplier left by the previous one.
MULTIPLIER_RULES: tuple[MultiplierRule, ...] = (
    MultiplierRule(
        name="streak",
        applies=_contains_any("streak"),
        adjust=lambda m: m * 1.5,
    ),
    MultiplierRule(
        name="conversation",
        applies=_contains_any("conversation", "response"),
        adjust=lambda m: min(m * 1.2, 2.0),
    ),
    MultiplierRule(
        name="skill",
        applies=_contains_any("accuracy", "grammar", "vocabulary"),
        adjust=lambda m: min(m * 1.1, 1.8),
    ),
)


# =============================================================================
# HELPERS
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity.

    Python's round() uses banker's rounding (22.5 -> 22); rewards and
    percentages need 22.5 -> 23.
    """
    return int(math.floor(value + 0.5))


def format_multiplier(multiplier: float) -> str:
    """Render a multiplier the way it appears in reward reasons (2.0 -> "2")."""
    if float(multiplier).is_integer():
        return str(int(multiplier))
    return repr(float(multiplier))


def _check_total_xp(total_xp: int) -> None:
    if not math.isfinite(total_xp) or total_xp < 0:
        raise ValueError(f"total_xp must be a finite non-negative number, got {total_xp!r}")


# =============================================================================
# LEVEL CURVE
# =============================================================================


def xp_for_level(level: int) -> int:
    """XP needed to go from level-1 to level (the bucket size of level).

    Level 1 is the floor and costs nothing.
    """
    if level <= 1:
        return 0
    return math.floor(BASE_LEVEL_XP * math.pow(LEVEL_GROWTH, level - 2))


def total_xp_for_level(target_level: int) -> int:
    """Total XP needed to have reached target_level."""
    return sum(xp_for_level(level) for level in range(2, target_level + 1))


def level_from_xp(total_xp: int) -> int:
    """Highest level whose cumulative threshold is <= total_xp.

    Raises:
        ValueError: If total_xp is negative or not finite
    """
    _check_total_xp(total_xp)

    level = 1
    next_threshold = xp_for_level(2)
    while next_threshold <= total_xp:
        level += 1
        next_threshold += xp_for_level(level + 1)
    return level


def xp_for_next_level(current_level: int) -> int:
    """Bucket size of the level after current_level."""
    return xp_for_level(current_level + 1)


def current_level_xp(total_xp: int, current_level: int) -> int:
    """XP earned inside current_level."""
    return total_xp - total_xp_for_level(current_level)


def xp_to_next_level(total_xp: int, current_level: int) -> int:
    """XP still missing to reach the level after current_level.

    A negative result means current_level does not match total_xp.
    """
    return total_xp_for_level(current_level + 1) - total_xp


def get_level_info(total_xp: int) -> LevelInfo:
    """Level, XP inside the level, next bucket size and percentage."""
    level = level_from_xp(total_xp)
    current = current_level_xp(total_xp, level)
    bucket = xp_for_next_level(level)

    if bucket > 0:
        progress = round_half_up(current / bucket * 100)
    else:
        progress = 0

    return LevelInfo(
        level=level,
        current_xp=current,
        xp_to_next_level=bucket,
        progress_percentage=progress,
    )


def check_level_up(old_xp: int, new_xp: int) -> bool:
    """True when new_xp lands on a higher level than old_xp."""
    return level_from_xp(new_xp) > level_from_xp(old_xp)


# =============================================================================
# REWARDS
# =============================================================================


def apply_multiplier_rules(action: str, multiplier: float = 1.0) -> float:
    """Run every matching rule of MULTIPLIER_RULES over multiplier."""
    for rule in MULTIPLIER_RULES:
        if rule.applies(action):
            multiplier = rule.adjust(multiplier)
    return multiplier


def calculate_xp_reward(
    action: str,
    multiplier: float = 1.0,
    custom_xp: int | None = None,
) -> XPReward:
    """Calculate the XP reward for an action.

    Unknown actions are worth DEFAULT_ACTION_XP. A custom_xp of 0 counts
    as not provided.

    Args:
        action: Action identifier, e.g. "send_message"
        multiplier: Caller-supplied multiplier before contextual rules
        custom_xp: Base XP overriding the table

    Returns:
        XPReward with the final multiplier
    """
    base_xp = custom_xp or XP_REWARDS.get(action) or DEFAULT_ACTION_XP
    multiplier = apply_multiplier_rules(action, multiplier)
    total_xp = round_half_up(base_xp * multiplier)

    reason = f"{action.replace('_', ' ')} (+{total_xp} XP)"
    if multiplier != 1.0:
        reason += f" x{format_multiplier(multiplier)}"

    return XPReward(
        total_xp=total_xp,
        reason=reason,
        base_xp=base_xp,
        multiplier=multiplier,
    )


# =============================================================================
# SKILLS & SUMMARY
# =============================================================================


def average_skill_level(skills: SkillSnapshot | Mapping[str, Any] | None) -> int:
    """Rounded mean of the present skill values, 0 when there are none."""
    if not isinstance(skills, SkillSnapshot):
        skills = SkillSnapshot.from_mapping(skills)

    values = skills.values()
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def generate_progress_summary(
    total_xp: int,
    skills: SkillSnapshot | Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Display-ready progress record for a learner."""
    if not isinstance(skills, SkillSnapshot):
        skills = SkillSnapshot.from_mapping(skills)

    info = get_level_info(total_xp)

    return {
        "level": info.level,
        "currentXP": info.current_xp,
        "xpToNext": info.xp_to_next_level,
        "progress": f"{info.current_xp}/{info.xp_to_next_level} XP",
        "progressPercentage": info.progress_percentage,
        "averageSkill": average_skill_level(skills),
        "totalXP": total_xp,
        "nextLevelXP": info.xp_to_next_level,
        "skills": skills.to_dict(),
    }
