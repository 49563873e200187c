"""Push scheduler - the heartbeat that sends reminder pushes."""

import asyncio
import logging
from datetime import datetime
from typing import Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from obicei.db.models import DueReminder, PushSubscriptionRecord
from obicei.db.repository import Repository
from obicei.engine.dedup import DedupLedger
from obicei.utils.constants import GONE_STATUSES
from obicei.utils.formatters import format_global_reminder, format_habit_reminder
from obicei.utils.time_utils import UTC, date_key, format_hhmm, utc_now

logger = logging.getLogger(__name__)


class Sender(Protocol):
    async def send(self, subscription: PushSubscriptionRecord, payload: str) -> int:
        ...


async def push_tick(
    repo: Repository,
    sender: Sender,
    ledger: DedupLedger,
    now: datetime | None = None,
    rate_limit_window: int = 3600,
) -> int:
    """Heartbeat job that sends every reminder due this minute.

    This runs once a minute and:
    1. Queries habit and global reminders whose UTC hour:minute is now
    2. Sends one push per (subscription, reminder) pair
    3. Deletes subscriptions the push service reports as gone
    4. Prunes expired sessions and stale rate-limit rows

    Returns:
        Number of pushes delivered
    """
    if now is None:
        now = utc_now()
    now = now.astimezone(UTC)
    ledger.roll(date_key(now))

    due: list[DueReminder] = []
    try:
        due += await repo.get_due_habit_reminders(now.hour, now.minute)
    except Exception as e:
        logger.error(f"Habit reminder query failed: {e}")

    try:
        due += await repo.get_due_global_reminders(now.hour, now.minute)
    except Exception as e:
        logger.error(f"Global reminder query failed: {e}")

    sent = 0
    if due:
        logger.info(f"Push tick {format_hhmm(now.hour, now.minute)} UTC: {len(due)} reminder(s) due")
        by_endpoint: dict[str, list[DueReminder]] = {}
        for item in due:
            by_endpoint.setdefault(item.subscription.endpoint, []).append(item)
        results = await asyncio.gather(
            *(_deliver_to_endpoint(repo, sender, ledger, items) for items in by_endpoint.values())
        )
        sent = sum(results)

    await _housekeeping(repo, int(now.timestamp()), rate_limit_window)
    return sent


async def _deliver_to_endpoint(
    repo: Repository,
    sender: Sender,
    ledger: DedupLedger,
    items: list[DueReminder],
) -> int:
    """Send one endpoint's reminders in turn, stopping once it is gone."""
    sent = 0
    for item in items:
        status = await _deliver(repo, sender, ledger, item)
        if status in GONE_STATUSES:
            break
        if status is not None and status < 400:
            sent += 1
    return sent


async def _deliver(
    repo: Repository,
    sender: Sender,
    ledger: DedupLedger,
    item: DueReminder,
) -> int | None:
    """Send one reminder. Failures stay isolated to this item.

    Returns:
        The push service status, or None when nothing was sent
    """
    subscription = item.subscription
    if item.habit_id is not None:
        payload = format_habit_reminder(item.habit_id, item.habit_name or "")
    else:
        payload = format_global_reminder()

    key = f"{subscription.endpoint}:{payload.tag}"
    if ledger.has_fired(key):
        return None

    try:
        status = await sender.send(subscription, payload.to_json())
    except Exception as e:
        logger.error(f"Push failed for {subscription.endpoint} ({payload.tag}): {e}")
        return None

    if status in GONE_STATUSES:
        logger.info(f"Subscription expired ({status}) for user {subscription.user_id}, removing")
        try:
            await repo.delete_push_subscription(subscription.endpoint)
        except Exception as e:
            logger.error(f"Failed to remove subscription {subscription.endpoint}: {e}")
        return status

    if status >= 400:
        logger.warning(f"Push rejected with {status} for {subscription.endpoint} ({payload.tag})")
        return status

    ledger.mark_fired(key)
    return status


async def _housekeeping(repo: Repository, now: int, rate_limit_window: int) -> None:
    try:
        removed = await repo.delete_expired_sessions(now)
        if removed:
            logger.info(f"Removed {removed} expired session(s)")
    except Exception as e:
        logger.error(f"Failed to clean expired sessions: {e}")

    try:
        await repo.cleanup_old_auth_attempts(now, rate_limit_window)
    except Exception as e:
        logger.error(f"Failed to clean old auth attempts: {e}")


def start_push_scheduler(
    repo: Repository,
    sender: Sender,
    rate_limit_window: int = 3600,
) -> AsyncIOScheduler:
    """Start the once-a-minute push job on the running event loop.

    The job fires at second 0 of every minute only. A restart therefore
    never re-runs a minute that was already served before it.
    """
    ledger = DedupLedger()
    scheduler = AsyncIOScheduler(timezone=UTC)
    scheduler.add_job(
        push_tick,
        CronTrigger(second=0, timezone=UTC),
        kwargs={
            "repo": repo,
            "sender": sender,
            "ledger": ledger,
            "rate_limit_window": rate_limit_window,
        },
        id="push_tick",
        name="push_tick",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=30,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Push scheduler started")
    return scheduler
