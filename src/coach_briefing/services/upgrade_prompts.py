"""Upgrade prompt triggers and rate limiting.

Decides when a free-tier user should see a contextual upgrade prompt, based
on how much they use the product:
- 2+ coaches created
- 20+ conversation messages
- 4+ workouts logged
- 7+ days since signup

Prompts are throttled:
- at most once per week per trigger type
- at most one prompt per client session (the marker lapses 12 hours after
  the prompt)
- never within 24 hours of the onboarding prompt

All state goes through an injected KeyValueStore and every check takes the
current time explicitly, so the rules can be evaluated anywhere and tested
deterministically.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

from ..config import SESSION_TTL_HOURS, Settings
from ..models.reports import parse_datetime
from ..storage import InMemoryKeyValueStore, KeyValueStore


logger = logging.getLogger(__name__)

MS_PER_HOUR = 1000 * 60 * 60
MS_PER_DAY = MS_PER_HOUR * 24

# Legacy markers written before timestamps were stored.
LEGACY_ONBOARDING_VALUE = "true"
LEGACY_SESSION_VALUE = "true"


class UpgradeTrigger(str, Enum):
    """Reasons an upgrade prompt can be shown."""

    COACHES_COUNT = "coaches_count"
    WORKOUTS_COUNT = "workouts_count"
    MESSAGES_COUNT = "messages_count"
    DAYS_ACTIVE = "days_active"
    MANUAL = "manual"


class SubscriptionTier(str, Enum):
    """Subscription tiers relevant to prompting."""

    FREE = "free"
    ELECTRIC = "electric"


class StorageKeys:
    """Store key prefixes; each is suffixed with ``_<user_id>``."""

    SIGNUP_DATE = "npUserSignupDate"
    ONBOARDING_SHOWN = "npOnboardingShown"
    LAST_PROMPT_TIME = "npUpgradePromptLast"
    LAST_TRIGGER_TIMES = "npUpgradeTriggerTimes"
    SESSION_PROMPTED = "npUpgradeSessionPrompted"


TRIGGER_MESSAGES: Dict[UpgradeTrigger, str] = {
    UpgradeTrigger.COACHES_COUNT: (
        "You're getting great value from multiple AI coaches. Consider becoming a "
        "founding member to support development while locking in your rate for new features."
    ),
    UpgradeTrigger.WORKOUTS_COUNT: (
        "You've been actively logging workouts. If you're finding value, consider becoming "
        "a founding member to shape how we evolve and access new features as they land."
    ),
    UpgradeTrigger.MESSAGES_COUNT: (
        "You're getting a lot out of your coach conversations. Consider founding membership "
        "to support your training journey and get access to all future features."
    ),
    UpgradeTrigger.DAYS_ACTIVE: (
        "You've been training with us for a week. If you're enjoying it, consider founding "
        "membership to lock in your rate while it's still available."
    ),
    UpgradeTrigger.MANUAL: (
        "Consider becoming a founding member to lock in your rate forever and support "
        "platform development as new advanced features and analytics land."
    ),
}


@dataclass
class RateLimits:
    """Throttling windows for upgrade prompts."""

    min_days_between_same_trigger: int = 7
    one_prompt_per_session: bool = True
    onboarding_cooldown_hours: int = 24
    session_ttl_hours: int = SESSION_TTL_HOURS


@dataclass
class TriggerThresholds:
    """Activity levels at which each trigger fires."""

    coach_count: int = 2
    messages_count: int = 20
    workout_count: int = 4
    days_active: int = 7


@dataclass
class UserActivity:
    """Usage counters for a user."""

    coach_count: int = 0
    messages_count: int = 0
    workout_count: int = 0
    days_since_signup: int = 0


@dataclass
class UpgradeDecision:
    """Outcome of evaluating a user for an upgrade prompt."""

    show: bool
    trigger: Optional[UpgradeTrigger] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "show": self.show,
            "trigger": self.trigger.value if self.trigger else None,
            "message": self.message,
        }


@dataclass
class OnboardingState:
    """Whether onboarding should show, and whether it showed recently."""

    should_show: bool
    shown_recently: bool

    def to_dict(self) -> dict:
        return {
            "shouldShow": self.should_show,
            "shownRecently": self.shown_recently,
        }


# =============================================================================
# Helpers
# =============================================================================

def storage_key(prefix: str, user_id: str) -> str:
    """Per-user store key."""
    return f"{prefix}_{user_id}"


def session_key(user_id: str, session_id: Optional[str] = None) -> str:
    """Key of the per-session prompted marker, scoped to a session when given."""
    key = storage_key(StorageKeys.SESSION_PROMPTED, user_id)
    return f"{key}_{session_id}" if session_id else key


def to_epoch_ms(moment: datetime) -> int:
    """Milliseconds since the epoch; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _parse_epoch_ms(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def was_prompted_this_session(
    session_store: KeyValueStore,
    user_id: str,
    now: datetime,
    session_id: Optional[str] = None,
    ttl_hours: int = SESSION_TTL_HOURS,
) -> bool:
    """Whether a prompt was already shown in the current session.

    The marker holds the time of the prompt; it lapses after ``ttl_hours`` so
    a long-lived session store cannot suppress prompts indefinitely.
    """
    value = session_store.get(session_key(user_id, session_id))
    if not value:
        return False
    if value == LEGACY_SESSION_VALUE:
        return True

    prompted_at = _parse_epoch_ms(value)
    if prompted_at is None:
        return False
    return (to_epoch_ms(now) - prompted_at) / MS_PER_HOUR < ttl_hours


def _load_trigger_times(store: KeyValueStore, user_id: str) -> Dict[str, int]:
    key = storage_key(StorageKeys.LAST_TRIGGER_TIMES, user_id)
    raw = store.get(key)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding corrupt trigger times for {user_id}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Discarding corrupt trigger times for {user_id}")
        return {}
    return {
        name: stamp
        for name, stamp in data.items()
        if isinstance(stamp, (int, float)) and not isinstance(stamp, bool)
    }


# =============================================================================
# Onboarding and signup tracking
# =============================================================================

def should_show_onboarding(store: KeyValueStore, user_id: Optional[str]) -> bool:
    """True when the user has never been shown onboarding."""
    if not user_id:
        return False
    return not store.get(storage_key(StorageKeys.ONBOARDING_SHOWN, user_id))


def mark_onboarding_shown(store: KeyValueStore, user_id: Optional[str], now: datetime) -> None:
    """Record that onboarding was shown, as a timestamp for the cooldown."""
    if not user_id:
        return
    store.set(storage_key(StorageKeys.ONBOARDING_SHOWN, user_id), str(to_epoch_ms(now)))


def was_onboarding_shown_recently(
    store: KeyValueStore,
    user_id: Optional[str],
    now: datetime,
    cooldown_hours: int = 24,
) -> bool:
    """Whether onboarding was shown within the cooldown window.

    The legacy ``"true"`` marker carries no timestamp and counts as expired.
    """
    if not user_id:
        return False

    value = store.get(storage_key(StorageKeys.ONBOARDING_SHOWN, user_id))
    if not value or value == LEGACY_ONBOARDING_VALUE:
        return False

    shown_at = _parse_epoch_ms(value)
    if shown_at is None:
        return False

    hours_since = (to_epoch_ms(now) - shown_at) / MS_PER_HOUR
    return hours_since < cooldown_hours


def get_days_since_signup(store: KeyValueStore, user_id: str, now: datetime) -> int:
    """Whole days since the user's first visit, recording it on first call."""
    key = storage_key(StorageKeys.SIGNUP_DATE, user_id)
    stored = store.get(key)
    signup = parse_datetime(stored) if stored else None

    if signup is None:
        if stored:
            logger.warning(f"Resetting unreadable signup date for {user_id}")
        store.set(key, now.isoformat())
        return 0

    diff_ms = abs(to_epoch_ms(now) - to_epoch_ms(signup))
    return math.floor(diff_ms / MS_PER_DAY)


# =============================================================================
# Rate limiting
# =============================================================================

def should_show_upgrade_prompt(
    trigger: UpgradeTrigger,
    store: KeyValueStore,
    session_store: KeyValueStore,
    user_id: Optional[str],
    now: datetime,
    limits: Optional[RateLimits] = None,
    session_id: Optional[str] = None,
) -> bool:
    """Check whether a prompt for this trigger passes the rate limits.

    Args:
        trigger: Trigger the prompt would be shown for
        store: Persistent per-user state
        session_store: State scoped to the current session
        user_id: Current user
        now: Current time
        limits: Throttling windows
        session_id: Client session the prompt would be shown in

    Returns:
        True if the prompt may be shown
    """
    if not user_id:
        return False
    limits = limits or RateLimits()

    if was_onboarding_shown_recently(store, user_id, now, limits.onboarding_cooldown_hours):
        return False

    if limits.one_prompt_per_session and was_prompted_this_session(
        session_store, user_id, now, session_id, limits.session_ttl_hours
    ):
        return False

    if trigger is not UpgradeTrigger.MANUAL:
        last_time = _load_trigger_times(store, user_id).get(trigger.value)
        if last_time:
            days_since = (to_epoch_ms(now) - last_time) / MS_PER_DAY
            if days_since < limits.min_days_between_same_trigger:
                return False

    return True


def record_prompt(
    trigger: UpgradeTrigger,
    store: KeyValueStore,
    session_store: KeyValueStore,
    user_id: Optional[str],
    now: datetime,
    session_id: Optional[str] = None,
) -> None:
    """Record that a prompt was shown for rate limiting."""
    if not user_id:
        return

    now_ms = to_epoch_ms(now)
    session_store.set(session_key(user_id, session_id), str(now_ms))

    trigger_times = _load_trigger_times(store, user_id)
    trigger_times[trigger.value] = now_ms
    store.set(storage_key(StorageKeys.LAST_TRIGGER_TIMES, user_id), json.dumps(trigger_times))

    store.set(storage_key(StorageKeys.LAST_PROMPT_TIME, user_id), str(now_ms))


def check_upgrade_triggers(
    activity: UserActivity,
    store: KeyValueStore,
    session_store: KeyValueStore,
    user_id: Optional[str],
    now: datetime,
    limits: Optional[RateLimits] = None,
    thresholds: Optional[TriggerThresholds] = None,
    session_id: Optional[str] = None,
) -> Optional[UpgradeTrigger]:
    """Find the first trigger whose threshold is met and whose rate limit allows it.

    Triggers are checked in priority order: coaches, messages, workouts, days active.
    """
    if not user_id:
        return None
    thresholds = thresholds or TriggerThresholds()

    candidates = [
        (activity.coach_count >= thresholds.coach_count, UpgradeTrigger.COACHES_COUNT),
        (activity.messages_count >= thresholds.messages_count, UpgradeTrigger.MESSAGES_COUNT),
        (activity.workout_count >= thresholds.workout_count, UpgradeTrigger.WORKOUTS_COUNT),
        (activity.days_since_signup >= thresholds.days_active, UpgradeTrigger.DAYS_ACTIVE),
    ]
    for reached, trigger in candidates:
        if reached and should_show_upgrade_prompt(
            trigger, store, session_store, user_id, now, limits, session_id
        ):
            return trigger
    return None


# =============================================================================
# Service
# =============================================================================

class UpgradePromptService:
    """Evaluates and records upgrade prompts against persistent and session stores."""

    def __init__(
        self,
        store: KeyValueStore,
        session_store: Optional[KeyValueStore] = None,
        limits: Optional[RateLimits] = None,
        thresholds: Optional[TriggerThresholds] = None,
    ) -> None:
        self.store = store
        self.session_store = session_store if session_store is not None else InMemoryKeyValueStore()
        self.limits = limits or RateLimits()
        self.thresholds = thresholds or TriggerThresholds()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: KeyValueStore,
        session_store: Optional[KeyValueStore] = None,
    ) -> "UpgradePromptService":
        """Build a service using the configured limits and thresholds."""
        limits = RateLimits(
            min_days_between_same_trigger=settings.min_days_between_same_trigger,
            one_prompt_per_session=settings.one_prompt_per_session,
            onboarding_cooldown_hours=settings.onboarding_cooldown_hours,
            session_ttl_hours=settings.session_ttl_hours,
        )
        thresholds = TriggerThresholds(
            coach_count=settings.coach_count_threshold,
            messages_count=settings.messages_count_threshold,
            workout_count=settings.workout_count_threshold,
            days_active=settings.days_active_threshold,
        )
        return cls(store, session_store, limits, thresholds)

    @staticmethod
    def is_premium(tier: Optional[str]) -> bool:
        return tier == SubscriptionTier.ELECTRIC.value

    def evaluate(
        self,
        user_id: Optional[str],
        activity: UserActivity,
        now: datetime,
        tier: Optional[str] = SubscriptionTier.FREE.value,
        session_id: Optional[str] = None,
    ) -> UpgradeDecision:
        """Decide whether to prompt this user now.

        Days since signup are read from (and on first visit written to) the
        persistent store and override ``activity.days_since_signup``.
        """
        if not user_id or self.is_premium(tier):
            return UpgradeDecision(show=False)

        activity = UserActivity(
            coach_count=activity.coach_count,
            messages_count=activity.messages_count,
            workout_count=activity.workout_count,
            days_since_signup=get_days_since_signup(self.store, user_id, now),
        )
        trigger = check_upgrade_triggers(
            activity,
            self.store,
            self.session_store,
            user_id,
            now,
            self.limits,
            self.thresholds,
            session_id,
        )
        if trigger is None:
            return UpgradeDecision(show=False)

        logger.info(f"Upgrade prompt triggered for {user_id}: {trigger.value}")
        return UpgradeDecision(show=True, trigger=trigger, message=TRIGGER_MESSAGES[trigger])

    def show_prompt(self, tier: Optional[str] = SubscriptionTier.FREE.value) -> UpgradeDecision:
        """Prompt requested by the user (e.g. from an upgrade button)."""
        if self.is_premium(tier):
            return UpgradeDecision(show=False)
        return UpgradeDecision(
            show=True,
            trigger=UpgradeTrigger.MANUAL,
            message=TRIGGER_MESSAGES[UpgradeTrigger.MANUAL],
        )

    def record_prompt(
        self,
        user_id: Optional[str],
        trigger: UpgradeTrigger,
        now: datetime,
        session_id: Optional[str] = None,
    ) -> bool:
        """Record a shown prompt. Manual prompts are not rate limited, so not recorded."""
        if not user_id or trigger is UpgradeTrigger.MANUAL:
            return False
        record_prompt(trigger, self.store, self.session_store, user_id, now, session_id)
        return True

    def onboarding_state(self, user_id: Optional[str], now: datetime) -> OnboardingState:
        return OnboardingState(
            should_show=should_show_onboarding(self.store, user_id),
            shown_recently=was_onboarding_shown_recently(
                self.store, user_id, now, self.limits.onboarding_cooldown_hours
            ),
        )

    def mark_onboarding_shown(self, user_id: Optional[str], now: datetime) -> None:
        mark_onboarding_shown(self.store, user_id, now)
