"""Briefing selection and card data models."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .reports import WeeklyReport, WorkoutRecord, to_camel


class InsightKind(str, Enum):
    """Which insight source the briefing card surfaces."""
    WEEKLY = "weekly"
    COMBINED = "combined"
    WORKOUT = "workout"
    NONE = "none"


@dataclass(frozen=True)
class InsightSource:
    """Result of the insight-freshness selection.

    ``report`` is set for WEEKLY and COMBINED, ``workout`` for COMBINED and
    WORKOUT. NONE carries neither and means "render nothing".
    """
    kind: InsightKind
    report: Optional[WeeklyReport] = None
    workout: Optional[WorkoutRecord] = None

    @classmethod
    def weekly(cls, report: WeeklyReport) -> "InsightSource":
        return cls(kind=InsightKind.WEEKLY, report=report)

    @classmethod
    def combined(cls, report: WeeklyReport, workout: WorkoutRecord) -> "InsightSource":
        return cls(kind=InsightKind.COMBINED, report=report, workout=workout)

    @classmethod
    def workout_only(cls, workout: WorkoutRecord) -> "InsightSource":
        return cls(kind=InsightKind.WORKOUT, workout=workout)

    @classmethod
    def none(cls) -> "InsightSource":
        return cls(kind=InsightKind.NONE)

    @property
    def is_empty(self) -> bool:
        return self.kind is InsightKind.NONE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a camelCase dictionary for JSON serialization."""
        result: Dict[str, Any] = {"kind": self.kind.value}
        if self.report is not None:
            result["report"] = self.report.model_dump(mode="json", by_alias=True)
        if self.workout is not None:
            result["workout"] = self.workout.model_dump(mode="json", by_alias=True)
        return result


class WorkoutDigest(BaseModel):
    """Workout details shown on the briefing card."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    workout_id: Optional[str] = None
    workout_name: Optional[str] = None
    completed_at: Optional[datetime] = None
    summary: str = Field(..., description="Truncated workout summary")


class BriefingCard(BaseModel):
    """View model for the dashboard briefing card."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "kind": "weekly",
                "title": "Coach's Take",
                "isWarning": False,
                "headline": "Increase squat volume",
                "quickWins": ["Add a mobility block before squats"],
                "weekId": "2024-W01",
                "workoutCount": 4,
            }
        },
    )

    kind: InsightKind = Field(..., description="Selected insight source")
    title: str = Field(..., description="Card heading")
    is_warning: bool = Field(default=False, description="Deload or red-flag state of the latest report")
    warning_message: Optional[str] = Field(default=None, description="Banner text for warning cards")
    headline: Optional[str] = Field(default=None, description="Top priority insight")
    quick_wins: List[str] = Field(default_factory=list, description="Up to three quick wins")
    week_id: Optional[str] = None
    week_start: Optional[date] = None
    week_end: Optional[date] = None
    workout_count: Optional[int] = None
    workout: Optional[WorkoutDigest] = None
    report_link: Optional[str] = Field(default=None, description="Dashboard path to the full weekly report")
    workout_link: Optional[str] = Field(default=None, description="Dashboard path to the workout")
