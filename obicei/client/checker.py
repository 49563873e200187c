"""In-tab reminder checker - the fallback delivery path while the client runs."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List

from obicei.client.platform import PERMISSION_GRANTED, NotificationPlatform
from obicei.client.registry import ReminderRegistry
from obicei.engine.dedup import DedupLedger
from obicei.utils.constants import CHECK_INTERVAL_SECONDS
from obicei.utils.formatters import (
    NotificationPayload,
    format_global_reminder,
    format_habit_reminder,
)
from obicei.utils.time_utils import date_key, local_now

logger = logging.getLogger(__name__)


class ReminderChecker:
    """Once-a-minute check of the local registry against the wall clock.

    States: stopped -> running. ``start`` while running is a no-op.
    """

    def __init__(
        self,
        registry: ReminderRegistry,
        ledger: DedupLedger,
        notifications: NotificationPlatform,
        timezone: str | None = None,
        interval: float = CHECK_INTERVAL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self.registry = registry
        self.ledger = ledger
        self.notifications = notifications
        self.timezone = timezone
        self.interval = interval
        self._clock = clock or (lambda: local_now(self.timezone))
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Reminder checker started (interval: {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Reminder checker stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.check()
            except Exception as e:
                logger.error(f"Reminder check failed: {e}")

    def check(self, now: datetime | None = None) -> List[NotificationPayload]:
        """Run one tick and return the notifications it showed."""
        if self.notifications.permission() != PERMISSION_GRANTED:
            return []

        if now is None:
            now = self._clock()

        # Day rollover happens before any scope is evaluated
        self.ledger.roll(date_key(now))

        due: list[NotificationPayload] = []
        for habit_id, entry in self.registry.get_all().items():
            if entry.hour == now.hour and entry.minute == now.minute:
                due.append(format_habit_reminder(habit_id, entry.habit_name))

        global_reminder = self.registry.get_global()
        if (
            global_reminder.enabled
            and global_reminder.hour == now.hour
            and global_reminder.minute == now.minute
        ):
            due.append(format_global_reminder())

        # The tag doubles as the scope key: habit-<id> or global-reminder
        shown = []
        for payload in due:
            if self.ledger.has_fired(payload.tag):
                continue
            self.notifications.show(payload)
            self.ledger.mark_fired(payload.tag)
            shown.append(payload)

        if shown:
            logger.info(f"Reminder checker fired {len(shown)} notification(s)")
        return shown
