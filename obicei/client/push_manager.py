"""Push subscription manager - keeps the server's copy of reminders in sync."""

import asyncio
import logging
from typing import Iterable

from obicei.client.api import ServerApi, ServerApiError
from obicei.client.platform import PushPlatform, PushPlatformError, PushSubscriptionHandle
from obicei.client.registry import ReminderRegistry
from obicei.db.models import GlobalReminderConfig, ReminderEntry
from obicei.utils.time_utils import local_to_utc

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class PushSubscriptionManager:
    """Owns the platform push subscription and the server-side reminder copy.

    The subscription handle is cached in memory only; the platform's own
    subscription store is the durable one.
    """

    def __init__(
        self,
        platform: PushPlatform,
        api: ServerApi,
        registry: ReminderRegistry,
        timezone: str | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.platform = platform
        self.api = api
        self.registry = registry
        self.timezone = timezone
        self.debounce_seconds = debounce_seconds
        self._cached: PushSubscriptionHandle | None = None
        self._pending: asyncio.TimerHandle | None = None
        self._sync_task: asyncio.Task | None = None

    @property
    def subscription(self) -> PushSubscriptionHandle | None:
        return self._cached

    async def subscribe(self) -> PushSubscriptionHandle | None:
        """Get the existing subscription or create one.

        Returns:
            The subscription, or None when push is unsupported or the
            subscription could not be created
        """
        if not self.platform.supported:
            return None

        try:
            existing = await self.platform.get_subscription()
            if existing:
                self._cached = existing
                return existing

            public_key = await self.api.get_vapid_public_key()
            subscription = await self.platform.subscribe(public_key)
        except (PushPlatformError, ServerApiError) as e:
            logger.warning(f"Could not create push subscription: {e}")
            return None

        self._cached = subscription
        logger.info("Created push subscription")
        return subscription

    async def sync_reminders(
        self,
        reminders: Iterable[ReminderEntry],
        global_reminder: GlobalReminderConfig | None = None,
    ) -> None:
        """Send the subscription and the reminder list (converted to UTC).

        With nothing left to remind about the subscription has no purpose,
        so an empty list with no enabled global reminder unsubscribes.
        """
        reminders = list(reminders)
        global_enabled = global_reminder is not None and global_reminder.enabled

        if not reminders and not global_enabled:
            await self.unsubscribe()
            return

        utc_reminders = []
        for entry in reminders:
            hour, minute = local_to_utc(entry.hour, entry.minute, self.timezone)
            utc_reminders.append(
                {
                    "habitId": entry.habit_id,
                    "habitName": entry.habit_name,
                    "hour": hour,
                    "minute": minute,
                }
            )

        utc_global = None
        if global_reminder is not None:
            hour, minute = local_to_utc(global_reminder.hour, global_reminder.minute, self.timezone)
            utc_global = {"enabled": global_reminder.enabled, "hour": hour, "minute": minute}

        subscription = self._cached or await self.subscribe()
        if subscription is None:
            logger.debug("No push subscription, skipping reminder sync")
            return

        await self.api.subscribe(subscription, utc_reminders, utc_global)
        logger.info(f"Synced {len(utc_reminders)} reminder(s) to server")

    async def sync_now(self) -> None:
        """Sync the current registry state. Failures are logged, not raised."""
        global_reminder = self.registry.get_global() if self.registry.global_configured() else None
        try:
            await self.sync_reminders(self.registry.get_all().values(), global_reminder)
        except (PushPlatformError, ServerApiError) as e:
            logger.error(f"Reminder sync failed: {e}")

    def schedule_sync(self) -> None:
        """Debounced sync: a burst of calls results in one server round-trip.

        Must be called from a running event loop.
        """
        if self._pending is not None:
            self._pending.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.debounce_seconds, self._fire_sync)

    def _fire_sync(self) -> None:
        self._pending = None
        self._sync_task = asyncio.ensure_future(self.sync_now())

    async def unsubscribe(self) -> None:
        """Drop the platform subscription and delete it server-side."""
        if not self.platform.supported:
            return

        subscription = await self.platform.get_subscription()
        if subscription is None:
            # Nothing of this device's is stored server-side
            self._cached = None
            return

        await self.platform.unsubscribe(subscription)
        try:
            await self.api.unsubscribe(subscription.endpoint)
        finally:
            self._cached = None
        logger.info("Unsubscribed from push")

    async def init_if_needed(self) -> None:
        """Re-establish the subscription for returning users.

        Also schedules a sync so stored UTC times follow the current
        daylight-saving offset. Safe to call repeatedly.
        """
        if not self.registry.has_reminders():
            return
        if not self.platform.supported:
            return

        if await self.subscribe() is not None:
            self.schedule_sync()
