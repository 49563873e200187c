"""Habit and settings store hooks that keep reminders in step with edits."""

import logging

from obicei.client.push_manager import PushSubscriptionManager
from obicei.client.registry import ReminderRegistry
from obicei.db.models import Habit

logger = logging.getLogger(__name__)


class ReminderHooks:
    """Called by the habit/settings stores after every mutation.

    Times are local. Registry writes are immediate; the server sync is
    debounced, so these must run inside the event loop.
    """

    def __init__(self, registry: ReminderRegistry, push_manager: PushSubscriptionManager):
        self.registry = registry
        self.push_manager = push_manager

    def habit_saved(self, habit: Habit) -> None:
        """A habit was created or updated."""
        if habit.reminder_enabled and not habit.is_archived:
            self.registry.schedule(habit.id, habit.name, habit.reminder_hour, habit.reminder_minute)
        else:
            self.registry.cancel(habit.id)
        self.push_manager.schedule_sync()

    def habit_deleted(self, habit_id: str) -> None:
        self.registry.cancel(habit_id)
        self.push_manager.schedule_sync()

    def settings_saved(self, enabled: bool, hour: int, minute: int) -> None:
        """The global reminder settings changed."""
        self.registry.set_global(enabled, hour, minute)
        self.push_manager.schedule_sync()
