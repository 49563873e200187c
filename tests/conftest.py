"""Shared fakes and helpers."""

from pathlib import Path

import pytest

from obicei.client.api import ServerApiError
from obicei.client.platform import PushPlatformError, PushSubscriptionHandle
from obicei.db.migrations import run_migrations
from obicei.db.repository import Repository


class FakeNotifications:
    """Notification platform that records what it shows."""

    def __init__(self, permission: str = "granted"):
        self._permission = permission
        self.shown = []

    def permission(self) -> str:
        return self._permission

    def show(self, payload) -> None:
        self.shown.append(payload)


class FakePushPlatform:
    """Push platform holding at most one subscription."""

    def __init__(self, supported: bool = True, fail: bool = False):
        self.supported = supported
        self.fail = fail
        self.current: PushSubscriptionHandle | None = None
        self.subscribe_keys = []
        self.unsubscribed = []

    async def get_subscription(self):
        return self.current

    async def subscribe(self, application_server_key: str) -> PushSubscriptionHandle:
        if self.fail:
            raise PushPlatformError("permission denied")
        self.subscribe_keys.append(application_server_key)
        self.current = PushSubscriptionHandle(
            endpoint=f"https://push.example.com/{len(self.subscribe_keys)}",
            p256dh="p256dh-key",
            auth="auth-secret",
        )
        return self.current

    async def unsubscribe(self, handle) -> None:
        self.unsubscribed.append(handle)
        self.current = None


class FakeServerApi:
    """In-memory stand-in for ServerApi."""

    def __init__(self, fail: bool = False, settings: dict | None = None):
        self.fail = fail
        self.settings = settings
        self.subscribe_calls = []
        self.unsubscribe_calls = []
        self.key_requests = 0

    async def get_vapid_public_key(self) -> str:
        self.key_requests += 1
        return "server-public-key"

    async def subscribe(self, subscription, reminders, global_reminder=None) -> None:
        if self.fail:
            raise ServerApiError("POST /api/push/subscribe returned 503", status_code=503)
        self.subscribe_calls.append((subscription, reminders, global_reminder))

    async def unsubscribe(self, endpoint) -> None:
        self.unsubscribe_calls.append(endpoint)

    async def get_settings(self) -> dict:
        if self.settings is None:
            raise ServerApiError("GET /api/settings failed: connection refused")
        return self.settings


class FakeSender:
    """Push sender returning canned statuses per endpoint."""

    def __init__(self, statuses: dict | None = None):
        self.statuses = statuses or {}
        self.sent = []

    async def send(self, subscription, payload: str) -> int:
        result = self.statuses.get(subscription.endpoint, 201)
        if isinstance(result, Exception):
            raise result
        self.sent.append((subscription.endpoint, payload))
        return result


async def open_repo(db_path: Path) -> Repository:
    await run_migrations(db_path)
    repo = Repository(db_path)
    await repo.connect()
    return repo


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "obicei.db"
