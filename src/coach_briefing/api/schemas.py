"""Request and response schemas for the Coach Briefing API."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.briefing import BriefingCard, InsightKind
from ..models.reports import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Briefing
# ============================================================================

class BriefingRequest(CamelModel):
    """Recent reports and workouts as fetched by the client."""

    # Entries stay untyped here; the selector treats unreadable ones as missing.
    recent_reports: List[Any] = Field(default_factory=list, description="Weekly reports, most recent first")
    recent_workouts: List[Any] = Field(default_factory=list, description="Workouts, most recent first")
    now: Optional[datetime] = Field(default=None, description="Evaluation time; defaults to request time")
    user_id: Optional[str] = Field(default=None, description="Used for deep links")
    coach_id: Optional[str] = Field(default=None, description="Used for deep links")


class SelectionResponse(CamelModel):
    """Selected insight source plus the independent warning flag."""

    kind: InsightKind
    report: Optional[Dict[str, Any]] = None
    workout: Optional[Dict[str, Any]] = None
    is_warning: bool = False
    report_age_days: Optional[int] = Field(
        default=None, description="Age of the latest report; null when unknown"
    )


class CardResponse(CamelModel):
    """Briefing card, or null when nothing should render."""

    card: Optional[BriefingCard] = None


# ============================================================================
# Upgrade prompts
# ============================================================================

class UpgradeEvaluateRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    tier: str = Field(default="free", description="Subscription tier")
    coach_count: int = Field(default=0, ge=0)
    messages_count: int = Field(default=0, ge=0)
    workout_count: int = Field(default=0, ge=0)
    session_id: Optional[str] = Field(default=None, description="Client session the prompt would show in")
    now: Optional[datetime] = None


class UpgradeRecordRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    trigger: str = Field(..., description="Trigger the prompt was shown for")
    session_id: Optional[str] = Field(default=None, description="Client session the prompt was shown in")
    now: Optional[datetime] = None


class UpgradeDecisionResponse(CamelModel):
    show: bool
    trigger: Optional[str] = None
    message: Optional[str] = None


class UpgradeRecordResponse(CamelModel):
    recorded: bool


class OnboardingResponse(CamelModel):
    should_show: bool
    shown_recently: bool
