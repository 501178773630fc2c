"""Dependency injection for API routes."""

from datetime import datetime, timezone
from functools import lru_cache

from ..config import Settings, get_settings
from ..services.upgrade_prompts import UpgradePromptService
from ..storage import InMemoryKeyValueStore, KeyValueStore, SqliteKeyValueStore


def get_app_settings() -> Settings:
    """Get the application settings."""
    return get_settings()


def get_now() -> datetime:
    """Request time. The only place the API reads the clock."""
    return datetime.now(timezone.utc)


@lru_cache
def get_kv_store() -> KeyValueStore:
    """Get the persistent key-value store."""
    settings = get_settings()
    return SqliteKeyValueStore(settings.store_db_path)


@lru_cache
def get_session_store() -> KeyValueStore:
    """Get the store for per-session prompt markers.

    Markers are keyed by the client's session id and lapse after the
    configured session window.
    """
    return InMemoryKeyValueStore()


@lru_cache
def get_upgrade_service() -> UpgradePromptService:
    """Get the upgrade prompt service instance."""
    return UpgradePromptService.from_settings(
        get_settings(),
        store=get_kv_store(),
        session_store=get_session_store(),
    )
