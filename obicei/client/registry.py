"""Reminder registry - the client's local record of scheduled reminders."""

import logging

from obicei.client.storage import LocalStore
from obicei.db.models import GlobalReminderConfig, ReminderEntry
from obicei.utils.constants import GLOBAL_REMINDER_KEY, REMINDERS_KEY

logger = logging.getLogger(__name__)


class ReminderRegistry:
    """Habit id -> reminder mapping plus the global reminder, in local time.

    No range validation happens here; callers validate before scheduling.
    """

    def __init__(self, store: LocalStore):
        self.store = store

    def _reminders(self) -> dict:
        return dict(self.store.get(REMINDERS_KEY, {}))

    def schedule(self, habit_id: str, habit_name: str, hour: int, minute: int) -> None:
        """Insert or overwrite the reminder for a habit."""
        reminders = self._reminders()
        reminders[habit_id] = {"habitName": habit_name, "hour": hour, "minute": minute}
        self.store.set(REMINDERS_KEY, reminders)
        logger.debug(f"Scheduled reminder for habit {habit_id} at {hour:02d}:{minute:02d}")

    def cancel(self, habit_id: str) -> None:
        """Remove the reminder for a habit. No-op if there is none."""
        reminders = self._reminders()
        if habit_id not in reminders:
            return
        del reminders[habit_id]
        self.store.set(REMINDERS_KEY, reminders)
        logger.debug(f"Cancelled reminder for habit {habit_id}")

    def get_all(self) -> dict[str, ReminderEntry]:
        """Get every scheduled reminder keyed by habit id."""
        return {
            habit_id: ReminderEntry(
                habit_id=habit_id,
                habit_name=config["habitName"],
                hour=config["hour"],
                minute=config["minute"],
            )
            for habit_id, config in self._reminders().items()
        }

    def get_global(self) -> GlobalReminderConfig:
        config = self.store.get(GLOBAL_REMINDER_KEY)
        if not config:
            return GlobalReminderConfig()
        return GlobalReminderConfig(
            enabled=bool(config["enabled"]), hour=config["hour"], minute=config["minute"]
        )

    def set_global(self, enabled: bool, hour: int, minute: int) -> None:
        self.store.set(
            GLOBAL_REMINDER_KEY, {"enabled": enabled, "hour": hour, "minute": minute}
        )

    def global_configured(self) -> bool:
        """True once the global reminder has been set on this installation."""
        return self.store.get(GLOBAL_REMINDER_KEY) is not None

    def has_reminders(self) -> bool:
        """True if any habit reminder or the global reminder is active."""
        return bool(self._reminders()) or self.get_global().enabled
