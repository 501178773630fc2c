"""Services for the Coach Briefing application."""

from .upgrade_prompts import (
    UpgradeTrigger,
    SubscriptionTier,
    UserActivity,
    UpgradeDecision,
    UpgradePromptService,
    check_upgrade_triggers,
    should_show_upgrade_prompt,
    record_prompt,
)

__all__ = [
    "UpgradeTrigger",
    "SubscriptionTier",
    "UserActivity",
    "UpgradeDecision",
    "UpgradePromptService",
    "check_upgrade_triggers",
    "should_show_upgrade_prompt",
    "record_prompt",
]
