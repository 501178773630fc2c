"""Coach briefing selection and upgrade prompt throttling."""

__version__ = "0.1.0"

from coach_briefing.models import (
    BriefingCard,
    InsightKind,
    InsightSource,
    WeeklyReport,
    WorkoutRecord,
)
from coach_briefing.selector import (
    has_insights,
    has_summary,
    is_warning,
    report_age_days,
    select_insight_source,
)
from coach_briefing.briefing import (
    build_briefing_card,
    card_from_source,
    truncate,
)
from coach_briefing.storage import (
    KeyValueStore,
    InMemoryKeyValueStore,
    SqliteKeyValueStore,
)
from coach_briefing.services.upgrade_prompts import (
    UpgradePromptService,
    UpgradeTrigger,
    UserActivity,
    check_upgrade_triggers,
    record_prompt,
    should_show_upgrade_prompt,
)

__all__ = [
    "BriefingCard",
    "InsightKind",
    "InsightSource",
    "WeeklyReport",
    "WorkoutRecord",
    "has_insights",
    "has_summary",
    "is_warning",
    "report_age_days",
    "select_insight_source",
    "build_briefing_card",
    "card_from_source",
    "truncate",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    # Upgrade prompts
    "UpgradePromptService",
    "UpgradeTrigger",
    "UserActivity",
    "check_upgrade_triggers",
    "record_prompt",
    "should_show_upgrade_prompt",
]
