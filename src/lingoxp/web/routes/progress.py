"""Progression engine endpoints.

One POST endpoint per engine calculation, plus the authenticated update of a
stored user's progress.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from lingoxp.config.app_config import load_app_config
from lingoxp.core import progress_calculator as calc
from lingoxp.db import user_level_repository as repo
from lingoxp.web.auth import require_caller
from lingoxp.web.schemas import (
    AverageSkillRequest,
    AverageSkillResponse,
    CurrentLevelRequest,
    CurrentLevelXPResponse,
    LevelFromXPResponse,
    LevelInfoResponse,
    LevelRequest,
    LevelUpRequest,
    LevelUpResponse,
    LevelXPResponse,
    NextLevelXPResponse,
    ProgressSummaryRequest,
    ProgressSummaryResponse,
    ProgressUpdateRequest,
    ProgressUpdateResponse,
    TargetLevelRequest,
    TotalXPAtLevelRequest,
    TotalXPForLevelResponse,
    TotalXPRequest,
    XPRewardRequest,
    XPRewardResponse,
    XPToNextResponse,
)

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.post("/calculate-xp-reward", response_model=XPRewardResponse)
async def calculate_xp_reward(body: XPRewardRequest) -> XPRewardResponse:
    """Calculate XP reward for an action."""
    reward = calc.calculate_xp_reward(body.action, body.multiplier, body.custom_xp)
    return XPRewardResponse.model_validate(reward.to_dict())


@router.post("/get-level-info", response_model=LevelInfoResponse)
async def get_level_info(body: TotalXPRequest) -> LevelInfoResponse:
    """Get level information from total XP."""
    info = calc.get_level_info(body.total_xp)
    return LevelInfoResponse.model_validate(info.to_dict())


@router.post("/calculate-xp-for-level", response_model=LevelXPResponse)
async def calculate_xp_for_level(body: LevelRequest) -> LevelXPResponse:
    """XP required to reach a level from the previous one."""
    return LevelXPResponse(level=body.level, xp_required=calc.xp_for_level(body.level))


@router.post("/calculate-xp-for-next-level", response_model=NextLevelXPResponse)
async def calculate_xp_for_next_level(body: CurrentLevelRequest) -> NextLevelXPResponse:
    """Bucket size of the level after currentLevel."""
    return NextLevelXPResponse(
        current_level=body.current_level,
        xp_required=calc.xp_for_next_level(body.current_level),
    )


@router.post("/calculate-level-from-xp", response_model=LevelFromXPResponse)
async def calculate_level_from_xp(body: TotalXPRequest) -> LevelFromXPResponse:
    """Level reached with totalXP."""
    return LevelFromXPResponse(total_xp=body.total_xp, level=calc.level_from_xp(body.total_xp))


@router.post("/calculate-current-level-xp", response_model=CurrentLevelXPResponse)
async def calculate_current_level_xp(body: TotalXPAtLevelRequest) -> CurrentLevelXPResponse:
    """XP earned inside currentLevel."""
    return CurrentLevelXPResponse(
        total_xp=body.total_xp,
        current_level=body.current_level,
        current_level_xp=calc.current_level_xp(body.total_xp, body.current_level),
    )


@router.post("/calculate-xp-to-next-level", response_model=XPToNextResponse)
async def calculate_xp_to_next_level(body: TotalXPAtLevelRequest) -> XPToNextResponse:
    """XP still needed to leave currentLevel."""
    return XPToNextResponse(
        total_xp=body.total_xp,
        current_level=body.current_level,
        xp_to_next=calc.xp_to_next_level(body.total_xp, body.current_level),
    )


@router.post("/check-level-up", response_model=LevelUpResponse)
async def check_level_up(body: LevelUpRequest) -> LevelUpResponse:
    """Whether going from oldXP to newXP crosses a level."""
    return LevelUpResponse(leveled_up=calc.check_level_up(body.old_xp, body.new_xp))


@router.post("/calculate-total-xp-for-level", response_model=TotalXPForLevelResponse)
async def calculate_total_xp_for_level(body: TargetLevelRequest) -> TotalXPForLevelResponse:
    """Cumulative XP needed to reach targetLevel."""
    return TotalXPForLevelResponse(
        target_level=body.target_level,
        total_xp=calc.total_xp_for_level(body.target_level),
    )


@router.post("/calculate-average-skill", response_model=AverageSkillResponse)
async def calculate_average_skill(body: AverageSkillRequest) -> AverageSkillResponse:
    """Rounded mean of the provided skills."""
    return AverageSkillResponse(average_skill=calc.average_skill_level(body.skills.present()))


@router.post("/progress-summary", response_model=ProgressSummaryResponse)
async def progress_summary(body: ProgressSummaryRequest) -> ProgressSummaryResponse:
    """Display-ready progress summary."""
    summary = calc.generate_progress_summary(body.total_xp, body.skills.present())
    return ProgressSummaryResponse.model_validate(summary)


@router.post("/{user_id}/update", response_model=ProgressUpdateResponse)
async def update_progress(
    user_id: str,
    body: ProgressUpdateRequest,
    _: str = Depends(require_caller),
) -> ProgressUpdateResponse:
    """Apply an action reward and/or raw XP plus skills to a stored user."""
    reward = None
    xp_gained = body.xp_amount or 0
    if body.action:
        reward = calc.calculate_xp_reward(body.action, body.multiplier)
        xp_gained += reward.total_xp

    max_award = load_app_config().xp.max_award
    if xp_gained > max_award:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"XP amount must be between 0 and {max_award}",
        )

    skills = body.skills.present() if body.skills else None

    try:
        record, applied = repo.apply_progress(user_id, xp_gained, skills)
    except repo.UserLevelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    summary = calc.generate_progress_summary(record.total_xp, record.skills)

    return ProgressUpdateResponse(
        user_id=user_id,
        xp_gained=xp_gained,
        reward=XPRewardResponse.model_validate(reward.to_dict()) if reward else None,
        leveled_up=applied.leveled_up,
        summary=ProgressSummaryResponse.model_validate(summary),
    )
