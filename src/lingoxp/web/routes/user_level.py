"""User level endpoints (private).

Stored level records: initialization, XP awards, sessions, skills,
achievements, stats and the leaderboard.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lingoxp.config.app_config import load_app_config
from lingoxp.core.user_level import UserLevel, compute_stats
from lingoxp.db import user_level_repository as repo
from lingoxp.web.auth import require_caller
from lingoxp.web.schemas import (
    AchievementRequest,
    AchievementResponse,
    AddXPRequest,
    AddXPResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    SessionResponse,
    SkillsPayload,
    UserLevelInit,
    UserLevelResponse,
    UserStatsResponse,
)

router = APIRouter(
    prefix="/api/user-level",
    tags=["user-level"],
    dependencies=[Depends(require_caller)],
)


def _to_response(record: UserLevel) -> UserLevelResponse:
    return UserLevelResponse.model_validate(record.to_dict())


def _not_found(error: repo.UserLevelNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.post("/initialize", response_model=UserLevelResponse)
async def initialize_user_level(body: UserLevelInit) -> UserLevelResponse:
    """Create a level record, or update name/email of an existing one."""
    record, _ = repo.initialize_user_level(body.user_id, body.user_name, body.user_email)
    return _to_response(record)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int | None = Query(default=None, ge=1),
    sort_by: str = Query(default="totalXP", alias="sortBy"),
) -> LeaderboardResponse:
    """Top users by totalXP, level or streak."""
    board = load_app_config().leaderboard
    effective_limit = min(limit or board.default_limit, board.max_limit)
    if sort_by not in repo.LEADERBOARD_SORT_FIELDS:
        sort_by = "totalXP"

    records = repo.get_leaderboard(effective_limit, sort_by)
    entries = [
        LeaderboardEntry(
            rank=rank,
            user_id=r.user_id,
            user_name=r.user_name,
            level=r.level,
            total_xp=r.total_xp,
            streak=r.streak,
            longest_streak=r.longest_streak,
        )
        for rank, r in enumerate(records, start=1)
    ]
    return LeaderboardResponse(entries=entries, count=len(entries), sort_by=sort_by)


@router.get("/{user_id}", response_model=UserLevelResponse)
async def get_user_level(user_id: str) -> UserLevelResponse:
    """Get the level record of a user."""
    try:
        return _to_response(repo.get_user_level(user_id))
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)


@router.post("/{user_id}/xp", response_model=AddXPResponse)
async def add_xp(user_id: str, body: AddXPRequest) -> AddXPResponse:
    """Add XP to a user."""
    max_award = load_app_config().xp.max_award
    if body.xp_amount > max_award:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"XP amount must be between 1 and {max_award}",
        )

    try:
        record, applied = repo.add_xp(user_id, body.xp_amount, body.reason)
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)

    return AddXPResponse(
        user_level=_to_response(record),
        xp_added=applied.xp_added,
        leveled_up=applied.leveled_up,
        previous_level=applied.previous_level,
        new_level=applied.new_level,
        reason=body.reason or "Activity completed",
    )


@router.post("/{user_id}/session", response_model=SessionResponse)
async def update_session(user_id: str) -> SessionResponse:
    """Count a practice session and update the streak."""
    try:
        record = repo.record_session(user_id)
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)

    return SessionResponse(
        total_sessions=record.total_sessions,
        streak=record.streak,
        longest_streak=record.longest_streak,
    )


@router.put("/{user_id}/skills", response_model=UserLevelResponse)
async def update_skills(user_id: str, body: SkillsPayload) -> UserLevelResponse:
    """Update only the provided skills."""
    try:
        record = repo.update_skills(user_id, body.present())
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)
    return _to_response(record)


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def get_stats(user_id: str) -> UserStatsResponse:
    """Level, streak and skill statistics."""
    try:
        record = repo.get_user_level(user_id)
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)
    return UserStatsResponse.model_validate(compute_stats(record))


@router.post("/{user_id}/achievements", response_model=AchievementResponse)
async def add_achievement(user_id: str, body: AchievementRequest) -> AchievementResponse:
    """Add an achievement (no-op if already unlocked)."""
    try:
        record, added = repo.add_achievement(user_id, body.achievement)
    except repo.UserLevelNotFoundError as e:
        raise _not_found(e)
    return AchievementResponse(added=added, achievements=record.achievements)
