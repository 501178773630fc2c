"""Briefing card builder.

Turns an insight selection into the view model the dashboard renders:
headline, quick wins, the latest workout narrative, a warning banner and deep
links into the full report or workout.
"""

import logging
from typing import Any, Optional, Sequence
from urllib.parse import urlencode

from .config import Settings, get_settings
from .models.briefing import BriefingCard, InsightKind, InsightSource, WorkoutDigest
from .models.reports import WeeklyReport, WorkoutRecord
from .selector import Timestamp, is_warning, latest_report, select_insight_source


logger = logging.getLogger(__name__)

WEEKLY_TITLE = "Coach's Take"
WORKOUT_TITLE = "Last Session"
DELOAD_MESSAGE = "Recovery week recommended — fatigue markers are elevated."

REPORT_PATH = "/training-grounds/reports/weekly"
WORKOUT_PATH = "/training-grounds/workouts"


def truncate(text: Optional[str], max_len: int = 200) -> Optional[str]:
    """Shorten text to max_len characters, ending with an ellipsis.

    Args:
        text: Text to shorten (None and empty strings pass through)
        max_len: Maximum number of characters kept before the ellipsis

    Returns:
        The original text if it fits, otherwise the trimmed text plus "…"
    """
    if not text or len(text) <= max_len:
        return text
    return text[:max_len].rstrip() + "…"


def warning_message(report: Optional[WeeklyReport], deload_action: str) -> Optional[str]:
    """Banner text for a warning report: its red flags, else the deload notice."""
    if not is_warning(report, deload_action):
        return None
    return report.red_flags or DELOAD_MESSAGE


def report_link(
    report: Optional[WeeklyReport],
    user_id: Optional[str],
    coach_id: Optional[str],
) -> Optional[str]:
    """Dashboard path to the full weekly report, if it can be addressed."""
    if report is None or not report.week_id or not user_id:
        return None
    query = {"userId": user_id, "weekId": report.week_id}
    if coach_id:
        query["coachId"] = coach_id
    return f"{REPORT_PATH}?{urlencode(query)}"


def workout_link(
    workout: Optional[WorkoutRecord],
    user_id: Optional[str],
    coach_id: Optional[str],
) -> Optional[str]:
    """Dashboard path to a workout, if it can be addressed."""
    if workout is None or not workout.workout_id or not user_id:
        return None
    query = {"workoutId": workout.workout_id, "userId": user_id}
    if coach_id:
        query["coachId"] = coach_id
    return f"{WORKOUT_PATH}?{urlencode(query)}"


def _digest(workout: WorkoutRecord, max_len: int) -> WorkoutDigest:
    return WorkoutDigest(
        workout_id=workout.workout_id,
        workout_name=workout.workout_name,
        completed_at=workout.completed_at,
        summary=truncate(workout.summary, max_len),
    )


def card_from_source(
    source: InsightSource,
    warning_report: Optional[WeeklyReport] = None,
    user_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Optional[BriefingCard]:
    """Build the card for an already-computed selection.

    Args:
        source: Result of select_insight_source
        warning_report: Latest report, used only for the warning state
        user_id: Current user, needed for deep links
        coach_id: Coach the dashboard is scoped to
        settings: Truncation and deload settings (defaults to app settings)

    Returns:
        BriefingCard, or None when there is nothing to show
    """
    if source.is_empty:
        return None

    settings = settings or get_settings()
    warning = is_warning(warning_report, settings.deload_action)

    if source.kind is InsightKind.WORKOUT:
        return BriefingCard(
            kind=source.kind,
            title=WORKOUT_TITLE,
            is_warning=warning,
            workout=_digest(source.workout, settings.workout_summary_max_length),
            workout_link=workout_link(source.workout, user_id, coach_id),
        )

    report = source.report
    quick_wins = [
        truncate(win, settings.quick_win_max_length)
        for win in report.quick_wins[: settings.max_quick_wins]
    ]

    card = BriefingCard(
        kind=source.kind,
        title=WEEKLY_TITLE,
        is_warning=warning,
        warning_message=warning_message(warning_report, settings.deload_action),
        headline=truncate(report.top_priority, settings.headline_max_length),
        quick_wins=quick_wins,
        week_id=report.week_id,
        week_start=report.week_start.date() if report.week_start else None,
        week_end=report.week_end.date() if report.week_end else None,
        workout_count=report.workout_count,
        report_link=report_link(report, user_id, coach_id),
    )

    if source.kind is InsightKind.COMBINED:
        card.workout = _digest(source.workout, settings.combined_summary_max_length)
        card.workout_link = workout_link(source.workout, user_id, coach_id)

    return card


def build_briefing_card(
    recent_reports: Optional[Sequence[Any]],
    recent_workouts: Optional[Sequence[Any]],
    now: Timestamp,
    user_id: Optional[str] = None,
    coach_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Optional[BriefingCard]:
    """Select the insight source and build the briefing card in one step."""
    settings = settings or get_settings()
    source = select_insight_source(
        recent_reports,
        recent_workouts,
        now,
        fresh_max_age_days=settings.fresh_report_max_age_days,
        combined_max_age_days=settings.combined_report_max_age_days,
    )
    card = card_from_source(
        source,
        warning_report=latest_report(recent_reports),
        user_id=user_id,
        coach_id=coach_id,
        settings=settings,
    )
    if card is not None:
        logger.debug(f"Built {card.kind.value} briefing card (warning={card.is_warning})")
    return card
