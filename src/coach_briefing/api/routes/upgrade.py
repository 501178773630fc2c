"""Upgrade prompt API routes."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from ..deps import get_now, get_upgrade_service
from ..schemas import (
    OnboardingResponse,
    UpgradeDecisionResponse,
    UpgradeEvaluateRequest,
    UpgradeRecordRequest,
    UpgradeRecordResponse,
)
from ...exceptions import UnknownTriggerError
from ...services.upgrade_prompts import UpgradePromptService, UpgradeTrigger, UserActivity


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/evaluate", response_model=UpgradeDecisionResponse)
async def evaluate_upgrade_prompt(
    request: UpgradeEvaluateRequest,
    service: UpgradePromptService = Depends(get_upgrade_service),
    request_time: datetime = Depends(get_now),
) -> UpgradeDecisionResponse:
    """Check the user's activity against upgrade triggers and rate limits."""
    activity = UserActivity(
        coach_count=request.coach_count,
        messages_count=request.messages_count,
        workout_count=request.workout_count,
    )
    decision = service.evaluate(
        request.user_id,
        activity,
        request.now or request_time,
        tier=request.tier,
        session_id=request.session_id,
    )
    return UpgradeDecisionResponse(**decision.to_dict())


@router.get("/manual", response_model=UpgradeDecisionResponse)
async def manual_upgrade_prompt(
    tier: str = "free",
    service: UpgradePromptService = Depends(get_upgrade_service),
) -> UpgradeDecisionResponse:
    """Prompt requested explicitly by the user; never rate limited."""
    return UpgradeDecisionResponse(**service.show_prompt(tier).to_dict())


@router.post("/record", response_model=UpgradeRecordResponse)
async def record_upgrade_prompt(
    request: UpgradeRecordRequest,
    service: UpgradePromptService = Depends(get_upgrade_service),
    request_time: datetime = Depends(get_now),
) -> UpgradeRecordResponse:
    """Record that a prompt was shown, so it is throttled next time."""
    try:
        trigger = UpgradeTrigger(request.trigger)
    except ValueError:
        raise UnknownTriggerError(request.trigger) from None

    recorded = service.record_prompt(
        request.user_id,
        trigger,
        request.now or request_time,
        session_id=request.session_id,
    )
    return UpgradeRecordResponse(recorded=recorded)


@router.get("/onboarding/{user_id}", response_model=OnboardingResponse)
async def get_onboarding_state(
    user_id: str,
    service: UpgradePromptService = Depends(get_upgrade_service),
    request_time: datetime = Depends(get_now),
) -> OnboardingResponse:
    """Whether onboarding should show and whether its cooldown is active."""
    state = service.onboarding_state(user_id, request_time)
    return OnboardingResponse(should_show=state.should_show, shown_recently=state.shown_recently)


@router.post("/onboarding/{user_id}", response_model=OnboardingResponse)
async def mark_onboarding_shown(
    user_id: str,
    service: UpgradePromptService = Depends(get_upgrade_service),
    request_time: datetime = Depends(get_now),
) -> OnboardingResponse:
    """Mark onboarding as shown now, starting the upgrade prompt cooldown."""
    service.mark_onboarding_shown(user_id, request_time)
    logger.info(f"Onboarding shown for {user_id}")
    state = service.onboarding_state(user_id, request_time)
    return OnboardingResponse(should_show=state.should_show, shown_recently=state.shown_recently)
