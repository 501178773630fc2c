"""Insight-freshness selector for the dashboard briefing card.

Weekly analytics are generated once a week and lose relevance as the week
ages. The selector decides what the briefing card surfaces:

- report at most 3 days old        -> weekly analytics only
- report 4-5 days old              -> weekly headline + latest workout summary
- report older than 5 days/missing -> latest workout summary only
- nothing usable                   -> nothing

Everything here is a pure function of its arguments. The current time is
always passed in so repeated calls within one render agree with each other.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from .config import (
    COMBINED_REPORT_MAX_AGE_DAYS,
    DELOAD_ACTION,
    FRESH_REPORT_MAX_AGE_DAYS,
)
from .models.briefing import InsightSource
from .models.reports import WeeklyReport, WorkoutRecord


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

Timestamp = Union[datetime, date]


def _as_utc(moment: Timestamp) -> datetime:
    """Normalize a date or datetime to an aware UTC datetime."""
    if not isinstance(moment, datetime):
        return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _first(items: Optional[Sequence[Any]], model: Any) -> Any:
    """Return the most recent snapshot as a model, or None.

    Raw mappings are parsed on the way in. Anything unreadable at the head of
    the list counts as missing rather than letting a later entry move up.
    """
    if not items:
        return None
    head = items[0]
    if isinstance(head, model):
        return head
    if not isinstance(head, dict):
        return None
    try:
        return model.model_validate(head)
    except PydanticValidationError as e:
        logger.warning(f"Ignoring unreadable {model.__name__} snapshot: {e.error_count()} errors")
        return None


def latest_report(recent_reports: Optional[Sequence[Any]]) -> Optional[WeeklyReport]:
    """Most recent weekly report from a most-recent-first sequence."""
    return _first(recent_reports, WeeklyReport)


def latest_workout(recent_workouts: Optional[Sequence[Any]]) -> Optional[WorkoutRecord]:
    """Most recent workout from a most-recent-first sequence."""
    return _first(recent_workouts, WorkoutRecord)


def report_age_days(report: Optional[WeeklyReport], now: Timestamp) -> Union[int, float]:
    """Whole days elapsed since the report's week end (or week start).

    Returns ``math.inf`` when the report has no usable reference date. The
    result is negative when the reference date lies in the future.
    """
    if report is None or report.reference_date is None:
        return math.inf
    elapsed = _as_utc(now) - _as_utc(report.reference_date)
    return math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)


def has_insights(report: Optional[WeeklyReport]) -> bool:
    """A report only counts as analytics when it has a top priority."""
    return bool(report is not None and report.top_priority)


def has_summary(workout: Optional[WorkoutRecord]) -> bool:
    """A workout is only usable as an insight when it has a summary."""
    return bool(workout is not None and workout.summary)


def is_warning(
    report: Optional[WeeklyReport],
    deload_action: str = DELOAD_ACTION,
) -> bool:
    """Whether the latest report calls for a deload or raises a red flag.

    Evaluated independently of the selected insight source, so a workout-only
    or empty briefing can still carry a warning.
    """
    if report is None:
        return False
    return report.suggested_action == deload_action or bool(report.red_flags)


def select_insight_source(
    recent_reports: Optional[Sequence[Any]],
    recent_workouts: Optional[Sequence[Any]],
    now: Timestamp,
    fresh_max_age_days: int = FRESH_REPORT_MAX_AGE_DAYS,
    combined_max_age_days: int = COMBINED_REPORT_MAX_AGE_DAYS,
) -> InsightSource:
    """Pick which insight the briefing card should show.

    Args:
        recent_reports: Weekly reports, most recent first. Only the first is read.
        recent_workouts: Workouts, most recent first. Only the first is read.
        now: Current time; a naive datetime is taken as UTC.
        fresh_max_age_days: Oldest report age shown on its own.
        combined_max_age_days: Oldest report age shown at all.

    Returns:
        InsightSource tagged WEEKLY, COMBINED, WORKOUT or NONE
    """
    report = latest_report(recent_reports)
    workout = latest_workout(recent_workouts)

    if has_insights(report):
        age = report_age_days(report, now)

        if age <= fresh_max_age_days:
            logger.debug(f"Briefing: weekly report {report.week_id} is fresh ({age}d)")
            return InsightSource.weekly(report)

        if age <= combined_max_age_days:
            if has_summary(workout):
                logger.debug(
                    f"Briefing: pairing report {report.week_id} ({age}d) "
                    f"with workout {workout.workout_id}"
                )
                return InsightSource.combined(report, workout)
            logger.debug(f"Briefing: report {report.week_id} ({age}d) has no workout to pair")
            return InsightSource.weekly(report)

        logger.debug(f"Briefing: report {report.week_id} is stale ({age}d)")

    if has_summary(workout):
        logger.debug(f"Briefing: falling back to workout {workout.workout_id}")
        return InsightSource.workout_only(workout)

    logger.debug("Briefing: nothing to show")
    return InsightSource.none()
