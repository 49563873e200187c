"""Data models."""

from dataclasses import dataclass
from datetime import datetime

from obicei.utils.constants import (
    DEFAULT_GLOBAL_REMINDER_HOUR,
    DEFAULT_GLOBAL_REMINDER_MINUTE,
    DEFAULT_HABIT_REMINDER_HOUR,
    DEFAULT_HABIT_REMINDER_MINUTE,
)


@dataclass
class User:
    """Account that owns habits and push subscriptions."""

    email: str
    created_at: datetime | None = None
    id: int | None = None


@dataclass
class Session:
    """Authentication session, created by the auth service."""

    token: str
    user_id: int
    expires_at: int  # Unix seconds


@dataclass
class Habit:
    """The reminder-relevant slice of a habit.

    Hour/minute are UTC when stored server-side and local on the client.
    """

    id: str
    name: str
    reminder_enabled: bool = False
    reminder_hour: int = DEFAULT_HABIT_REMINDER_HOUR
    reminder_minute: int = DEFAULT_HABIT_REMINDER_MINUTE
    is_archived: bool = False
    user_id: int | None = None
    created_at: datetime | None = None


@dataclass
class UserSettings:
    """Per-user global reminder settings (UTC on the server)."""

    user_id: int
    global_reminder_enabled: bool = False
    global_reminder_hour: int = DEFAULT_GLOBAL_REMINDER_HOUR
    global_reminder_minute: int = DEFAULT_GLOBAL_REMINDER_MINUTE


@dataclass
class PushSubscriptionRecord:
    """A Web Push endpoint and its encryption keys. Keyed on endpoint."""

    endpoint: str
    p256dh: str
    auth: str
    user_id: int | None = None

    def to_subscription_info(self) -> dict:
        """Shape expected by the Web Push protocol libraries."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


@dataclass
class ReminderEntry:
    """One habit reminder in the client registry (local time)."""

    habit_id: str
    habit_name: str
    hour: int
    minute: int


@dataclass
class GlobalReminderConfig:
    """Singleton global reminder (local on the client, UTC on the server)."""

    enabled: bool = False
    hour: int = DEFAULT_GLOBAL_REMINDER_HOUR
    minute: int = DEFAULT_GLOBAL_REMINDER_MINUTE


@dataclass
class DueReminder:
    """A (subscription, reminder) pair matched by a scheduler tick.

    ``habit_id`` is None for the global reminder.
    """

    subscription: PushSubscriptionRecord
    habit_id: str | None = None
    habit_name: str | None = None
