"""Configuration settings for the Coach Briefing service."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/coach_briefing/config.py
# .parent.parent.parent = project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Freshness windows for weekly analytics on the briefing card. Product-tuned.
FRESH_REPORT_MAX_AGE_DAYS = 3
COMBINED_REPORT_MAX_AGE_DAYS = 5
DELOAD_ACTION = "deload"

# Upgrade prompt throttling. Product-tuned.
MIN_DAYS_BETWEEN_SAME_TRIGGER = 7
ONBOARDING_COOLDOWN_HOURS = 24
SESSION_TTL_HOURS = 12


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COACH_BRIEFING_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Key-value store backing the upgrade prompt state
    store_db_path: Path | None = None

    # Briefing freshness rules
    fresh_report_max_age_days: int = FRESH_REPORT_MAX_AGE_DAYS
    combined_report_max_age_days: int = COMBINED_REPORT_MAX_AGE_DAYS
    deload_action: str = DELOAD_ACTION

    # Briefing card truncation
    headline_max_length: int = 220
    quick_win_max_length: int = 130
    max_quick_wins: int = 3
    combined_summary_max_length: int = 150
    workout_summary_max_length: int = 220

    # Upgrade prompt rate limits
    min_days_between_same_trigger: int = MIN_DAYS_BETWEEN_SAME_TRIGGER
    one_prompt_per_session: bool = True
    onboarding_cooldown_hours: int = ONBOARDING_COOLDOWN_HOURS
    session_ttl_hours: int = SESSION_TTL_HOURS

    # Upgrade trigger thresholds
    coach_count_threshold: int = 2
    messages_count_threshold: int = 20
    workout_count_threshold: int = 4
    days_active_threshold: int = 7

    def model_post_init(self, __context) -> None:
        """Set the default store path after initialization."""
        if self.store_db_path is None:
            self.store_db_path = PROJECT_ROOT / "coach_briefing.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
