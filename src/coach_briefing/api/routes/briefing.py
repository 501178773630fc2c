"""Briefing card API routes."""

import logging
import math
from datetime import datetime

from fastapi import APIRouter, Depends

from ..deps import get_app_settings, get_now
from ..schemas import BriefingRequest, CardResponse, SelectionResponse
from ...briefing import build_briefing_card
from ...config import Settings
from ...selector import is_warning, latest_report, report_age_days, select_insight_source


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/select", response_model=SelectionResponse)
async def select_briefing_source(
    request: BriefingRequest,
    settings: Settings = Depends(get_app_settings),
    request_time: datetime = Depends(get_now),
) -> SelectionResponse:
    """
    Pick which insight the dashboard briefing should show.

    Returns the selected source (weekly, combined, workout or none) along
    with the warning state of the latest report, which callers combine
    with the source when rendering.
    """
    now = request.now or request_time
    source = select_insight_source(
        request.recent_reports,
        request.recent_workouts,
        now,
        fresh_max_age_days=settings.fresh_report_max_age_days,
        combined_max_age_days=settings.combined_report_max_age_days,
    )
    report = latest_report(request.recent_reports)
    age = report_age_days(report, now)
    payload = source.to_dict()

    return SelectionResponse(
        kind=source.kind,
        report=payload.get("report"),
        workout=payload.get("workout"),
        is_warning=is_warning(report, settings.deload_action),
        report_age_days=None if math.isinf(age) else age,
    )


@router.post("/card", response_model=CardResponse)
async def get_briefing_card(
    request: BriefingRequest,
    settings: Settings = Depends(get_app_settings),
    request_time: datetime = Depends(get_now),
) -> CardResponse:
    """Build the briefing card view model; ``card`` is null when nothing applies."""
    card = build_briefing_card(
        request.recent_reports,
        request.recent_workouts,
        request.now or request_time,
        user_id=request.user_id,
        coach_id=request.coach_id,
        settings=settings,
    )
    return CardResponse(card=card)
