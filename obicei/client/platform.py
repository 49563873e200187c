"""Platform boundaries: notification permission/display and push subscriptions."""

import logging
from dataclasses import dataclass
from typing import Protocol

from obicei.utils.formatters import NotificationPayload

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"


class PushPlatformError(Exception):
    """The platform refused or failed to create a push subscription."""


@dataclass(frozen=True)
class PushSubscriptionHandle:
    """Opaque subscription produced by the platform push service."""

    endpoint: str
    p256dh: str
    auth: str

    def to_json(self) -> dict:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class NotificationPlatform(Protocol):
    def permission(self) -> str:
        """Return "granted", "denied" or "default"."""
        ...

    def show(self, payload: NotificationPayload) -> None:
        ...


class PushPlatform(Protocol):
    supported: bool

    async def get_subscription(self) -> PushSubscriptionHandle | None:
        ...

    async def subscribe(self, application_server_key: str) -> PushSubscriptionHandle:
        ...

    async def unsubscribe(self, handle: PushSubscriptionHandle) -> None:
        ...


class LogNotificationPlatform:
    """Notification sink for headless clients: writes notifications to the log."""

    def __init__(self, granted: bool = True):
        self.granted = granted

    def permission(self) -> str:
        return PERMISSION_GRANTED if self.granted else "denied"

    def show(self, payload: NotificationPayload) -> None:
        logger.info(f"[{payload.tag}] {payload.title}: {payload.body}")


class UnsupportedPushPlatform:
    """Platform without a push service; the subscription manager stands down."""

    supported = False

    async def get_subscription(self) -> PushSubscriptionHandle | None:
        return None

    async def subscribe(self, application_server_key: str) -> PushSubscriptionHandle:
        raise PushPlatformError("Push messaging is not supported on this platform")

    async def unsubscribe(self, handle: PushSubscriptionHandle) -> None:
        return None
