"""Data models for the Coach Briefing service."""

from .reports import (
    ActionableInsights,
    AnalyticsData,
    FatigueManagement,
    ReportMetadata,
    StructuredAnalytics,
    WeeklyReport,
    WorkoutRecord,
    to_camel,
)
from .briefing import (
    BriefingCard,
    InsightKind,
    InsightSource,
    WorkoutDigest,
)

__all__ = [
    "ActionableInsights",
    "AnalyticsData",
    "FatigueManagement",
    "ReportMetadata",
    "StructuredAnalytics",
    "WeeklyReport",
    "WorkoutRecord",
    "to_camel",
    "BriefingCard",
    "InsightKind",
    "InsightSource",
    "WorkoutDigest",
]
