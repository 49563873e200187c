"""Client-side reminder pipeline wiring."""

import logging

from obicei.client.api import ServerApi, ServerApiError
from obicei.client.checker import ReminderChecker
from obicei.client.hooks import ReminderHooks
from obicei.client.platform import (
    LogNotificationPlatform,
    NotificationPlatform,
    PushPlatform,
    UnsupportedPushPlatform,
)
from obicei.client.push_manager import PushSubscriptionManager
from obicei.client.registry import ReminderRegistry
from obicei.client.storage import LocalStore
from obicei.config import Config
from obicei.engine.dedup import DedupLedger
from obicei.utils.time_utils import utc_to_local

logger = logging.getLogger(__name__)


class ReminderClient:
    """Registry, dedup ledger, in-tab checker and push manager for one installation."""

    def __init__(
        self,
        api: ServerApi,
        store: LocalStore,
        notifications: NotificationPlatform | None = None,
        push: PushPlatform | None = None,
        timezone: str | None = None,
        debounce_seconds: float = Config.SYNC_DEBOUNCE_MS / 1000,
    ):
        self.api = api
        self.timezone = timezone
        self.registry = ReminderRegistry(store)
        self.ledger = DedupLedger(store)
        self.checker = ReminderChecker(
            self.registry,
            self.ledger,
            notifications or LogNotificationPlatform(),
            timezone=timezone,
        )
        self.push_manager = PushSubscriptionManager(
            push or UnsupportedPushPlatform(),
            api,
            self.registry,
            timezone=timezone,
            debounce_seconds=debounce_seconds,
        )
        self.hooks = ReminderHooks(self.registry, self.push_manager)

    @classmethod
    def from_config(cls, **kwargs) -> "ReminderClient":
        api = ServerApi(Config.SERVER_URL, Config.SESSION_TOKEN)
        store = LocalStore(Config.CLIENT_STORE_PATH)
        return cls(api, store, timezone=Config.LOCAL_TIMEZONE, **kwargs)

    async def pull_global_reminder(self) -> None:
        """Adopt the server's global reminder if none is set locally yet."""
        if self.registry.global_configured():
            return
        try:
            settings = await self.api.get_settings()
        except ServerApiError as e:
            logger.warning(f"Could not load settings from server: {e}")
            return

        hour, minute = utc_to_local(
            settings["globalReminderHour"], settings["globalReminderMinute"], self.timezone
        )
        self.registry.set_global(bool(settings["globalReminderEnabled"]), hour, minute)

    async def start(self) -> None:
        """App startup: start the checker, then restore push if needed."""
        self.checker.start()
        await self.pull_global_reminder()
        await self.push_manager.init_if_needed()

    async def stop(self) -> None:
        await self.checker.stop()
