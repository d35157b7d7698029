"""Pydantic schemas for the Web API.

Request and response models for the progression engine and user levels.
JSON keys use the camelCase names clients already send (totalXP, customXP...);
Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from lingoxp import __version__


# Keep engine arithmetic inside float range (1.1 ** n overflows past n ~ 7400)
MAX_LEVEL = 1000
MAX_TOTAL_XP = 10**12
MAX_MULTIPLIER = 100


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# ENGINE SCHEMAS
# =============================================================================


class SkillsPayload(_Model):
    """Optional skill scores, each 0-100."""

    accuracy: float | None = Field(default=None, ge=0, le=100)
    vocabulary: float | None = Field(default=None, ge=0, le=100)
    grammar: float | None = Field(default=None, ge=0, le=100)
    pronunciation: float | None = Field(default=None, ge=0, le=100)
    fluency: float | None = Field(default=None, ge=0, le=100)

    def present(self) -> dict[str, float]:
        return self.model_dump(exclude_none=True)


class XPRewardRequest(_Model):
    action: str = Field(..., min_length=1, max_length=100)
    multiplier: float = Field(default=1.0, ge=0, le=MAX_MULTIPLIER, allow_inf_nan=False)
    custom_xp: int | None = Field(default=None, ge=0, le=MAX_TOTAL_XP, alias="customXP")


class XPRewardResponse(_Model):
    total_xp: int = Field(alias="totalXP")
    reason: str
    base_xp: int = Field(alias="baseXP")
    multiplier: float


class TotalXPRequest(_Model):
    total_xp: int = Field(..., ge=0, le=MAX_TOTAL_XP, alias="totalXP")


class LevelInfoResponse(_Model):
    level: int
    current_xp: int = Field(alias="currentXP")
    xp_to_next_level: int = Field(alias="xpToNextLevel")
    progress_percentage: int = Field(alias="progressPercentage")


class LevelRequest(_Model):
    level: int = Field(..., ge=0, le=MAX_LEVEL)


class LevelXPResponse(_Model):
    level: int
    xp_required: int = Field(alias="xpRequired")


class CurrentLevelRequest(_Model):
    current_level: int = Field(..., ge=0, le=MAX_LEVEL, alias="currentLevel")


class NextLevelXPResponse(_Model):
    current_level: int = Field(alias="currentLevel")
    xp_required: int = Field(alias="xpRequired")


class LevelFromXPResponse(_Model):
    total_xp: int = Field(alias="totalXP")
    level: int


class TotalXPAtLevelRequest(_Model):
    total_xp: int = Field(..., ge=0, le=MAX_TOTAL_XP, alias="totalXP")
    current_level: int = Field(..., ge=1, le=MAX_LEVEL, alias="currentLevel")


class CurrentLevelXPResponse(_Model):
    total_xp: int = Field(alias="totalXP")
    current_level: int = Field(alias="currentLevel")
    current_level_xp: int = Field(alias="currentLevelXP")


class XPToNextResponse(_Model):
    total_xp: int = Field(alias="totalXP")
    current_level: int = Field(alias="currentLevel")
    xp_to_next: int = Field(alias="xpToNext")


class LevelUpRequest(_Model):
    old_xp: int = Field(..., ge=0, le=MAX_TOTAL_XP, alias="oldXP")
    new_xp: int = Field(..., ge=0, le=MAX_TOTAL_XP, alias="newXP")


class LevelUpResponse(_Model):
    leveled_up: bool = Field(alias="leveledUp")


class TargetLevelRequest(_Model):
    target_level: int = Field(..., ge=0, le=MAX_LEVEL, alias="targetLevel")


class TotalXPForLevelResponse(_Model):
    target_level: int = Field(alias="targetLevel")
    total_xp: int = Field(alias="totalXP")


class AverageSkillRequest(_Model):
    skills: SkillsPayload = Field(default_factory=SkillsPayload)


class AverageSkillResponse(_Model):
    average_skill: int = Field(alias="averageSkill")


class ProgressSummaryRequest(_Model):
    total_xp: int = Field(..., ge=0, le=MAX_TOTAL_XP, alias="totalXP")
    skills: SkillsPayload = Field(default_factory=SkillsPayload)


class ProgressSummaryResponse(_Model):
    level: int
    current_xp: int = Field(alias="currentXP")
    xp_to_next: int = Field(alias="xpToNext")
    progress: str
    progress_percentage: int = Field(alias="progressPercentage")
    average_skill: int = Field(alias="averageSkill")
    total_xp: int = Field(alias="totalXP")
    next_level_xp: int = Field(alias="nextLevelXP")
    skills: dict[str, float]


class ProgressUpdateRequest(_Model):
    """Progress update for a stored user."""

    xp_amount: int | None = Field(default=None, ge=0, le=MAX_TOTAL_XP, alias="xpAmount")
    action: str | None = Field(default=None, min_length=1, max_length=100)
    multiplier: float = Field(default=1.0, ge=0, le=MAX_MULTIPLIER, allow_inf_nan=False)
    skills: SkillsPayload | None = None


class ProgressUpdateResponse(_Model):
    user_id: str = Field(alias="userId")
    xp_gained: int = Field(alias="xpGained")
    reward: XPRewardResponse | None = None
    leveled_up: bool = Field(alias="leveledUp")
    summary: ProgressSummaryResponse


# =============================================================================
# USER LEVEL SCHEMAS
# =============================================================================


class UserLevelInit(_Model):
    user_id: str = Field(..., min_length=1, max_length=128, alias="userId")
    user_name: str | None = Field(default=None, max_length=100, alias="userName")
    user_email: str | None = Field(default=None, max_length=200, alias="userEmail")


class UserLevelResponse(_Model):
    user_id: str = Field(alias="userId")
    user_name: str = Field(alias="userName")
    user_email: str = Field(alias="userEmail")
    level: int
    current_xp: int = Field(alias="currentXP")
    total_xp: int = Field(alias="totalXP")
    xp_to_next_level: int = Field(alias="xpToNextLevel")
    streak: int
    longest_streak: int = Field(alias="longestStreak")
    total_sessions: int = Field(alias="totalSessions")
    last_session_date: str | None = Field(default=None, alias="lastSessionDate")
    skills: dict[str, float]
    achievements: list[str]
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class AddXPRequest(_Model):
    xp_amount: int = Field(..., ge=1, alias="xpAmount")
    reason: str | None = Field(default=None, max_length=200)


class AddXPResponse(_Model):
    user_level: UserLevelResponse = Field(alias="userLevel")
    xp_added: int = Field(alias="xpAdded")
    leveled_up: bool = Field(alias="leveledUp")
    previous_level: int = Field(alias="previousLevel")
    new_level: int = Field(alias="newLevel")
    reason: str


class SessionResponse(_Model):
    total_sessions: int = Field(alias="totalSessions")
    streak: int
    longest_streak: int = Field(alias="longestStreak")


class AchievementRequest(_Model):
    achievement: str = Field(..., min_length=1, max_length=100)


class AchievementResponse(_Model):
    added: bool
    achievements: list[str]


class UserStatsResponse(_Model):
    level: int
    total_xp: int = Field(alias="totalXP")
    current_xp: int = Field(alias="currentXP")
    xp_to_next_level: int = Field(alias="xpToNextLevel")
    progress_percentage: int = Field(alias="progressPercentage")
    streak: int
    longest_streak: int = Field(alias="longestStreak")
    total_sessions: int = Field(alias="totalSessions")
    skills: dict[str, float]
    achievements: list[str]


class LeaderboardEntry(_Model):
    rank: int
    user_id: str = Field(alias="userId")
    user_name: str = Field(alias="userName")
    level: int
    total_xp: int = Field(alias="totalXP")
    streak: int
    longest_streak: int = Field(alias="longestStreak")


class LeaderboardResponse(_Model):
    entries: list[LeaderboardEntry]
    count: int
    sort_by: str = Field(alias="sortBy")


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = __version__
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
