"""Snapshot models for weekly analytics reports and workout records.

Reports and workouts are fetched from the backend and handed to the briefing
selector as-is. The web client sends camelCase keys while the analytics
backend writes snake_case inside ``analyticsData``, so every model accepts
both. Parsing is tolerant: a malformed field becomes ``None`` instead of
failing the whole snapshot, so one corrupt record cannot break the dashboard.
"""

from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def clean_text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for blanks and non-strings."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def clean_identifier(value: Any) -> Optional[str]:
    """Return an opaque identifier as a string, accepting numeric ids."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return clean_text(value)


def raw_text(value: Any) -> Optional[str]:
    """Return the value when it is a non-empty string, as sent."""
    if isinstance(value, str) and value:
        return value
    return None


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse a report date or timestamp into an aware UTC datetime.

    Plain calendar dates are taken as midnight UTC; timestamps keep their
    time of day and offset. Returns None when the value cannot be read.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            day = date.fromisoformat(text)
        except ValueError:
            parsed = parse_datetime(text)
            if parsed is None:
                return None
        else:
            return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None when it cannot be read."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _object_or_none(value: Any) -> Any:
    # Nested snapshot objects must be mappings (or already-built models).
    if isinstance(value, (dict, BaseModel)):
        return value
    return None


class SnapshotModel(BaseModel):
    """Base for read-only backend snapshots."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ActionableInsights(SnapshotModel):
    """Narrative insights produced by the weekly analytics run."""

    top_priority: Optional[str] = Field(default=None, description="Single headline insight")
    quick_wins: List[str] = Field(default_factory=list, description="Small, concrete suggestions")
    red_flags: Optional[str] = Field(default=None, description="Urgent warning, if any")

    @field_validator("top_priority", mode="before")
    @classmethod
    def _normalize_top_priority(cls, value: Any) -> Optional[str]:
        # The analytics backend emits an object; the client a plain string.
        if isinstance(value, dict):
            return raw_text(value.get("insight")) or raw_text(value.get("recommended_action"))
        return raw_text(value)

    @field_validator("quick_wins", mode="before")
    @classmethod
    def _normalize_quick_wins(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [text for text in (clean_text(item) for item in value) if text]

    @field_validator("red_flags", mode="before")
    @classmethod
    def _normalize_red_flags(cls, value: Any) -> Optional[str]:
        if isinstance(value, (list, tuple)):
            flags = [text for text in (clean_text(item) for item in value) if text]
            return "; ".join(flags) or None
        return raw_text(value)


class FatigueManagement(SnapshotModel):
    """Fatigue assessment from the weekly analytics run."""

    suggested_action: Optional[str] = Field(default=None, description="e.g. maintain, deload")

    @field_validator("suggested_action", mode="before")
    @classmethod
    def _normalize_action(cls, value: Any) -> Optional[str]:
        # Compared verbatim against the configured deload action.
        return raw_text(value)


class StructuredAnalytics(SnapshotModel):
    """Structured section of the analytics payload."""

    actionable_insights: Optional[ActionableInsights] = None
    fatigue_management: Optional[FatigueManagement] = None

    @field_validator("actionable_insights", "fatigue_management", mode="before")
    @classmethod
    def _require_object(cls, value: Any) -> Any:
        return _object_or_none(value)


class AnalyticsData(SnapshotModel):
    """Analytics payload attached to a weekly report."""

    structured_analytics: Optional[StructuredAnalytics] = None

    @field_validator("structured_analytics", mode="before")
    @classmethod
    def _require_object(cls, value: Any) -> Any:
        return _object_or_none(value)


class ReportMetadata(SnapshotModel):
    """Informational report metadata."""

    workout_count: Optional[int] = None

    @field_validator("workout_count", mode="before")
    @classmethod
    def _normalize_count(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None


class WeeklyReport(SnapshotModel):
    """A backend-generated summary of one ISO training week."""

    week_id: Optional[str] = Field(default=None, description="ISO week id, YYYY-Www")
    week_start: Optional[datetime] = None
    week_end: Optional[datetime] = None
    analytics_data: Optional[AnalyticsData] = None
    metadata: Optional[ReportMetadata] = None

    @field_validator("week_id", mode="before")
    @classmethod
    def _normalize_week_id(cls, value: Any) -> Optional[str]:
        return clean_identifier(value)

    @field_validator("week_start", "week_end", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> Optional[datetime]:
        return parse_instant(value)

    @field_validator("analytics_data", "metadata", mode="before")
    @classmethod
    def _require_object(cls, value: Any) -> Any:
        return _object_or_none(value)

    @property
    def reference_date(self) -> Optional[datetime]:
        """Instant the report's freshness is measured from (UTC)."""
        return self.week_end or self.week_start

    @property
    def insights(self) -> Optional[ActionableInsights]:
        structured = self.analytics_data.structured_analytics if self.analytics_data else None
        return structured.actionable_insights if structured else None

    @property
    def fatigue(self) -> Optional[FatigueManagement]:
        structured = self.analytics_data.structured_analytics if self.analytics_data else None
        return structured.fatigue_management if structured else None

    @property
    def top_priority(self) -> Optional[str]:
        return self.insights.top_priority if self.insights else None

    @property
    def quick_wins(self) -> List[str]:
        return list(self.insights.quick_wins) if self.insights else []

    @property
    def red_flags(self) -> Optional[str]:
        return self.insights.red_flags if self.insights else None

    @property
    def suggested_action(self) -> Optional[str]:
        return self.fatigue.suggested_action if self.fatigue else None

    @property
    def workout_count(self) -> Optional[int]:
        return self.metadata.workout_count if self.metadata else None


class WorkoutRecord(SnapshotModel):
    """A logged workout, possibly carrying an AI-written summary."""

    workout_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    summary: Optional[str] = Field(default=None, description="Narrative summary of the session")
    workout_name: Optional[str] = None

    @field_validator("workout_id", mode="before")
    @classmethod
    def _normalize_workout_id(cls, value: Any) -> Optional[str]:
        return clean_identifier(value)

    @field_validator("summary", mode="before")
    @classmethod
    def _normalize_summary(cls, value: Any) -> Optional[str]:
        return raw_text(value)

    @field_validator("workout_name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> Optional[str]:
        return clean_text(value)

    @field_validator("completed_at", mode="before")
    @classmethod
    def _normalize_completed_at(cls, value: Any) -> Optional[datetime]:
        return parse_datetime(value)
