"""HTTP routes: push subscriptions, reminder settings and habit reminders."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from obicei.db.models import Habit, PushSubscriptionRecord, UserSettings
from obicei.db.repository import Repository
from obicei.server.dependencies import get_current_user_id, get_repo
from obicei.server.schemas import (
    HabitCreateRequest,
    HabitUpdateRequest,
    SettingsRequest,
    SubscribeRequest,
    UnsubscribeRequest,
)
from obicei.utils.constants import (
    DEFAULT_GLOBAL_REMINDER_HOUR,
    DEFAULT_GLOBAL_REMINDER_MINUTE,
    DEFAULT_HABIT_REMINDER_HOUR,
    DEFAULT_HABIT_REMINDER_MINUTE,
    MAX_HABIT_NAME_LENGTH,
)
from obicei.utils.time_utils import is_valid_time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def habit_to_json(habit: Habit) -> dict:
    return {
        "id": habit.id,
        "name": habit.name,
        "reminderEnabled": habit.reminder_enabled,
        "reminderHour": habit.reminder_hour,
        "reminderMinute": habit.reminder_minute,
        "isArchived": habit.is_archived,
    }


def settings_to_json(settings: UserSettings) -> dict:
    return {
        "globalReminderEnabled": settings.global_reminder_enabled,
        "globalReminderHour": settings.global_reminder_hour,
        "globalReminderMinute": settings.global_reminder_minute,
    }


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name or len(name) > MAX_HABIT_NAME_LENGTH:
        raise HTTPException(
            status_code=400, detail=f"name must be 1-{MAX_HABIT_NAME_LENGTH} characters"
        )
    return name


@router.get("/health")
async def health() -> dict:
    return {"ok": True}


# Push


@router.get("/push/vapid-public-key")
async def vapid_public_key(request: Request) -> dict:
    return {"publicKey": request.app.state.vapid.public_key}


@router.post("/push/subscribe")
async def subscribe(
    body: SubscribeRequest,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    """Upsert the caller's subscription and enable the listed reminders (UTC)."""
    sub = body.subscription
    if not sub or not sub.endpoint or not sub.keys or not sub.keys.p256dh or not sub.keys.auth:
        raise HTTPException(status_code=400, detail="Valid subscription required")

    await repo.upsert_push_subscription(
        PushSubscriptionRecord(
            endpoint=sub.endpoint, p256dh=sub.keys.p256dh, auth=sub.keys.auth, user_id=user_id
        )
    )

    for reminder in body.reminders or []:
        if not is_valid_time(reminder.hour, reminder.minute):
            logger.warning(f"Skipping reminder for habit {reminder.habit_id}: invalid time")
            continue
        await repo.enable_habit_reminder(user_id, reminder.habit_id, reminder.hour, reminder.minute)

    if body.global_reminder and is_valid_time(body.global_reminder.hour, body.global_reminder.minute):
        await repo.upsert_settings(
            UserSettings(
                user_id=user_id,
                global_reminder_enabled=body.global_reminder.enabled,
                global_reminder_hour=body.global_reminder.hour,
                global_reminder_minute=body.global_reminder.minute,
            )
        )

    logger.info(f"Push subscription saved for user {user_id}")
    return {"ok": True}


@router.post("/push/unsubscribe")
async def unsubscribe(
    body: UnsubscribeRequest | None = None,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    """Delete one subscription, or every one of the caller's with ``allDevices``."""
    if body is None or (not body.endpoint and not body.all_devices):
        raise HTTPException(status_code=400, detail="endpoint or allDevices is required")

    if body.endpoint:
        owned = {s.endpoint for s in await repo.get_push_subscriptions(user_id)}
        if body.endpoint in owned:
            await repo.delete_push_subscription(body.endpoint)
    else:
        removed = await repo.delete_push_subscriptions_for_user(user_id)
        logger.info(f"Removed {removed} push subscription(s) for user {user_id}")
    return {"ok": True}


# Settings


@router.get("/settings")
async def get_settings(
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    return settings_to_json(await repo.get_settings(user_id))


@router.put("/settings")
async def put_settings(
    body: SettingsRequest,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    """Save the global reminder. Invalid times fall back to the default."""
    if is_valid_time(body.global_reminder_hour, body.global_reminder_minute):
        hour, minute = body.global_reminder_hour, body.global_reminder_minute
    else:
        hour, minute = DEFAULT_GLOBAL_REMINDER_HOUR, DEFAULT_GLOBAL_REMINDER_MINUTE

    await repo.upsert_settings(
        UserSettings(
            user_id=user_id,
            global_reminder_enabled=body.global_reminder_enabled,
            global_reminder_hour=hour,
            global_reminder_minute=minute,
        )
    )
    return {"ok": True}


# Habits


@router.get("/habits")
async def list_habits(
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> list[dict]:
    return [habit_to_json(h) for h in await repo.get_habits_by_user(user_id)]


@router.post("/habits", status_code=201)
async def create_habit(
    body: HabitCreateRequest,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    hour = DEFAULT_HABIT_REMINDER_HOUR if body.reminder_hour is None else body.reminder_hour
    minute = DEFAULT_HABIT_REMINDER_MINUTE if body.reminder_minute is None else body.reminder_minute
    if body.reminder_enabled and not is_valid_time(hour, minute):
        raise HTTPException(
            status_code=400, detail="reminderHour must be 0-23 and reminderMinute must be 0-59"
        )

    habit = await repo.create_habit(
        Habit(
            id=body.id or str(uuid.uuid4()),
            user_id=user_id,
            name=_clean_name(body.name),
            reminder_enabled=body.reminder_enabled,
            reminder_hour=hour,
            reminder_minute=minute,
        )
    )
    return habit_to_json(habit)


@router.put("/habits/{habit_id}")
async def update_habit(
    habit_id: str,
    body: HabitUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    habit = await repo.get_habit(user_id, habit_id)
    if habit is None:
        raise HTTPException(status_code=404, detail="Habit not found")

    if body.name is not None:
        habit.name = _clean_name(body.name)
    if body.reminder_enabled is not None:
        habit.reminder_enabled = body.reminder_enabled
    if body.reminder_hour is not None:
        if not 0 <= body.reminder_hour <= 23:
            raise HTTPException(status_code=400, detail="reminderHour must be 0-23")
        habit.reminder_hour = body.reminder_hour
    if body.reminder_minute is not None:
        if not 0 <= body.reminder_minute <= 59:
            raise HTTPException(status_code=400, detail="reminderMinute must be 0-59")
        habit.reminder_minute = body.reminder_minute
    if body.is_archived is not None:
        habit.is_archived = body.is_archived

    await repo.update_habit(habit)
    return habit_to_json(habit)


@router.delete("/habits/{habit_id}")
async def delete_habit(
    habit_id: str,
    user_id: int = Depends(get_current_user_id),
    repo: Repository = Depends(get_repo),
) -> dict:
    if not await repo.delete_habit(user_id, habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"ok": True}
