"""Tests for the push subscription manager and the store hooks."""

import asyncio

from obicei.client.app import ReminderClient
from obicei.client.hooks import ReminderHooks
from obicei.client.platform import PushSubscriptionHandle, UnsupportedPushPlatform
from obicei.client.push_manager import PushSubscriptionManager
from obicei.client.registry import ReminderRegistry
from obicei.client.storage import LocalStore
from obicei.config import Config
from obicei.db.models import GlobalReminderConfig, Habit, ReminderEntry

from conftest import FakeNotifications, FakePushPlatform, FakeServerApi

# Fixed UTC-5, no daylight saving
TZ = "Etc/GMT+5"


def make_manager(platform=None, api=None, debounce=0.01):
    registry = ReminderRegistry(LocalStore())
    platform = platform or FakePushPlatform()
    api = api or FakeServerApi()
    manager = PushSubscriptionManager(
        platform, api, registry, timezone=TZ, debounce_seconds=debounce
    )
    return manager, registry, platform, api


def test_subscribe_unsupported_returns_none():
    manager, _, _, api = make_manager(platform=UnsupportedPushPlatform())

    assert asyncio.run(manager.subscribe()) is None
    assert api.key_requests == 0


def test_subscribe_creates_with_server_key():
    manager, _, platform, api = make_manager()

    subscription = asyncio.run(manager.subscribe())

    assert subscription is not None
    assert platform.subscribe_keys == ["server-public-key"]
    assert manager.subscription == subscription


def test_subscribe_reuses_existing_platform_subscription():
    platform = FakePushPlatform()
    platform.current = PushSubscriptionHandle("https://push.example.com/old", "k", "a")
    manager, _, _, api = make_manager(platform=platform)

    subscription = asyncio.run(manager.subscribe())

    assert subscription.endpoint == "https://push.example.com/old"
    assert api.key_requests == 0
    assert platform.subscribe_keys == []


def test_subscribe_failure_returns_none():
    manager, _, _, _ = make_manager(platform=FakePushPlatform(fail=True))

    assert asyncio.run(manager.subscribe()) is None


def test_sync_converts_local_times_to_utc():
    manager, _, _, api = make_manager()

    asyncio.run(
        manager.sync_reminders(
            [ReminderEntry("h1", "Drink water", 9, 0), ReminderEntry("h2", "Sleep", 22, 30)],
            GlobalReminderConfig(enabled=True, hour=20, minute=0),
        )
    )

    assert len(api.subscribe_calls) == 1
    subscription, reminders, global_reminder = api.subscribe_calls[0]
    assert subscription.endpoint == "https://push.example.com/1"
    assert reminders == [
        {"habitId": "h1", "habitName": "Drink water", "hour": 14, "minute": 0},
        {"habitId": "h2", "habitName": "Sleep", "hour": 3, "minute": 30},
    ]
    assert global_reminder == {"enabled": True, "hour": 1, "minute": 0}


def test_sync_empty_list_unsubscribes():
    manager, _, platform, api = make_manager()
    asyncio.run(manager.sync_reminders([ReminderEntry("h1", "Walk", 7, 0)]))
    endpoint = platform.current.endpoint

    asyncio.run(manager.sync_reminders([]))

    assert platform.current is None
    assert [h.endpoint for h in platform.unsubscribed] == [endpoint]
    assert api.unsubscribe_calls == [endpoint]
    assert manager.subscription is None


def test_sync_empty_list_without_subscription_skips_server():
    manager, _, platform, api = make_manager()

    asyncio.run(manager.sync_reminders([]))

    assert platform.unsubscribed == []
    assert api.unsubscribe_calls == []
    assert manager.subscription is None


def test_sync_empty_list_keeps_subscription_for_global_reminder():
    manager, _, platform, api = make_manager()

    asyncio.run(manager.sync_reminders([], GlobalReminderConfig(True, 20, 0)))

    assert api.unsubscribe_calls == []
    assert len(api.subscribe_calls) == 1
    assert platform.current is not None


def test_sync_without_push_support_skips():
    manager, _, _, api = make_manager(platform=UnsupportedPushPlatform())

    asyncio.run(manager.sync_reminders([ReminderEntry("h1", "Walk", 7, 0)]))

    assert api.subscribe_calls == []


def test_hooks_burst_collapses_into_one_sync():
    async def scenario(manager, registry):
        hooks = ReminderHooks(registry, manager)
        hooks.habit_saved(Habit(id="a", name="A", reminder_enabled=True, reminder_hour=9, reminder_minute=0))
        hooks.habit_saved(Habit(id="b", name="B", reminder_enabled=True, reminder_hour=10, reminder_minute=15))
        hooks.habit_saved(Habit(id="c", name="C", reminder_enabled=False))
        await asyncio.sleep(0.1)

    manager, registry, _, api = make_manager()
    asyncio.run(scenario(manager, registry))

    assert len(api.subscribe_calls) == 1
    _, reminders, global_reminder = api.subscribe_calls[0]
    assert sorted((r["habitId"], r["hour"], r["minute"]) for r in reminders) == [
        ("a", 14, 0),
        ("b", 15, 15),
    ]
    assert global_reminder is None
    assert set(registry.get_all()) == {"a", "b"}


def test_hooks_delete_last_reminder_unsubscribes():
    async def scenario(manager, registry):
        hooks = ReminderHooks(registry, manager)
        hooks.habit_saved(Habit(id="a", name="A", reminder_enabled=True, reminder_hour=9, reminder_minute=0))
        await asyncio.sleep(0.1)
        hooks.habit_deleted("a")
        await asyncio.sleep(0.1)

    manager, registry, platform, api = make_manager()
    asyncio.run(scenario(manager, registry))

    assert len(api.subscribe_calls) == 1
    assert api.unsubscribe_calls == ["https://push.example.com/1"]
    assert platform.current is None


def test_hooks_archived_habit_is_cancelled():
    async def scenario(manager, registry):
        hooks = ReminderHooks(registry, manager)
        hooks.habit_saved(Habit(id="a", name="A", reminder_enabled=True, is_archived=True))
        await asyncio.sleep(0.05)

    manager, registry, _, _ = make_manager()
    asyncio.run(scenario(manager, registry))

    assert registry.get_all() == {}


def test_sync_failure_is_logged_not_raised(caplog):
    async def scenario(manager, registry):
        ReminderHooks(registry, manager).habit_saved(
            Habit(id="a", name="A", reminder_enabled=True, reminder_hour=9, reminder_minute=0)
        )
        await asyncio.sleep(0.1)

    manager, registry, _, _ = make_manager(api=FakeServerApi(fail=True))
    asyncio.run(scenario(manager, registry))

    # Local state stays authoritative
    assert set(registry.get_all()) == {"a"}
    assert "Reminder sync failed" in caplog.text


def test_settings_saved_syncs_global_reminder():
    async def scenario(manager, registry):
        ReminderHooks(registry, manager).settings_saved(True, 20, 0)
        await asyncio.sleep(0.1)

    manager, registry, _, api = make_manager()
    asyncio.run(scenario(manager, registry))

    assert registry.get_global() == GlobalReminderConfig(True, 20, 0)
    _, reminders, global_reminder = api.subscribe_calls[0]
    assert reminders == []
    assert global_reminder == {"enabled": True, "hour": 1, "minute": 0}


def test_init_if_needed_without_reminders_does_nothing():
    async def scenario(manager):
        await manager.init_if_needed()
        await asyncio.sleep(0.05)

    manager, _, platform, api = make_manager()
    asyncio.run(scenario(manager))

    assert platform.subscribe_keys == []
    assert api.subscribe_calls == []


def test_init_if_needed_resubscribes_and_resyncs():
    async def scenario(manager):
        await manager.init_if_needed()
        await manager.init_if_needed()
        await asyncio.sleep(0.1)

    manager, registry, platform, api = make_manager()
    registry.schedule("h1", "Drink water", 9, 0)
    asyncio.run(scenario(manager))

    # Second call reuses the platform subscription
    assert platform.subscribe_keys == ["server-public-key"]
    assert len(api.subscribe_calls) == 1


def test_reminder_client_pulls_global_reminder_and_starts():
    async def scenario(client):
        await client.start()
        running = client.checker.running
        await asyncio.sleep(0.1)
        await client.stop()
        return running

    api = FakeServerApi(
        settings={"globalReminderEnabled": True, "globalReminderHour": 1, "globalReminderMinute": 0}
    )
    platform = FakePushPlatform()
    client = ReminderClient(
        api,
        LocalStore(),
        notifications=FakeNotifications(),
        push=platform,
        timezone=TZ,
        debounce_seconds=0.01,
    )

    assert asyncio.run(scenario(client)) is True
    assert client.registry.get_global() == GlobalReminderConfig(True, 20, 0)
    assert len(api.subscribe_calls) == 1
    assert not client.checker.running


def test_reminder_client_keeps_local_global_reminder():
    api = FakeServerApi(
        settings={"globalReminderEnabled": True, "globalReminderHour": 1, "globalReminderMinute": 0}
    )
    client = ReminderClient(api, LocalStore(), timezone=TZ)
    client.registry.set_global(False, 18, 0)

    asyncio.run(client.pull_global_reminder())

    assert client.registry.get_global() == GlobalReminderConfig(False, 18, 0)


def test_reminder_client_tolerates_unreachable_server():
    client = ReminderClient(FakeServerApi(), LocalStore(), timezone=TZ)

    asyncio.run(client.pull_global_reminder())

    assert not client.registry.global_configured()


def test_reminder_client_from_config(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "SERVER_URL", "https://obicei.example.com/")
    monkeypatch.setattr(Config, "SESSION_TOKEN", "token-a")
    monkeypatch.setattr(Config, "CLIENT_STORE_PATH", tmp_path / "client.json")
    monkeypatch.setattr(Config, "LOCAL_TIMEZONE", TZ)

    client = ReminderClient.from_config()
    client.registry.set_global(True, 7, 30)

    assert client.api.base_url == "https://obicei.example.com"
    assert client.api.session_token == "token-a"
    assert client.push_manager.timezone == TZ
    # Registry and ledger persist to the configured store
    reloaded = ReminderClient.from_config()
    assert reloaded.registry.get_global() == GlobalReminderConfig(True, 7, 30)
