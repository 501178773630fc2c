"""Shared fixtures for Coach Briefing tests."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

import pytest

from coach_briefing.config import Settings
from coach_briefing.models.reports import WeeklyReport, WorkoutRecord
from coach_briefing.storage import InMemoryKeyValueStore


NOW = datetime(2024, 1, 9, 12, 0, tzinfo=timezone.utc)


def report_payload(
    week_end: Optional[str] = "2024-01-07",
    week_start: Optional[str] = "2024-01-01",
    top_priority: Optional[Any] = "Increase squat volume",
    quick_wins: Optional[Any] = None,
    red_flags: Optional[Any] = None,
    suggested_action: Optional[str] = None,
    week_id: Optional[str] = "2024-W01",
    workout_count: Optional[int] = 4,
) -> Dict[str, Any]:
    """Build a weekly report payload shaped like the backend response."""
    return {
        "weekId": week_id,
        "weekStart": week_start,
        "weekEnd": week_end,
        "analyticsData": {
            "structured_analytics": {
                "actionable_insights": {
                    "top_priority": top_priority,
                    "quick_wins": quick_wins if quick_wins is not None else [],
                    "red_flags": red_flags,
                },
                "fatigue_management": {
                    "suggested_action": suggested_action,
                },
            }
        },
        "metadata": {"workoutCount": workout_count},
    }


def make_report(age_days: Optional[int] = None, now: datetime = NOW, **kwargs) -> WeeklyReport:
    """Build a WeeklyReport, optionally with week_end `age_days` before `now`."""
    if age_days is not None:
        week_end = now.date() - timedelta(days=age_days)
        kwargs["week_end"] = week_end.isoformat()
        kwargs["week_start"] = (week_end - timedelta(days=6)).isoformat()
    return WeeklyReport.model_validate(report_payload(**kwargs))


def make_workout(
    summary: Optional[str] = "Ran 5k at an easy pace",
    workout_id: Optional[str] = "w-123",
    workout_name: Optional[str] = "Easy Run",
    completed_at: Optional[str] = "2024-01-08T07:30:00Z",
) -> WorkoutRecord:
    return WorkoutRecord.model_validate({
        "workoutId": workout_id,
        "workoutName": workout_name,
        "completedAt": completed_at,
        "summary": summary,
    })


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, with a temporary store path."""
    return Settings(_env_file=None, store_db_path=tmp_path / "kv.db")


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()
