"""Notification payload formatters."""

import json
from dataclasses import asdict, dataclass

from obicei.utils.constants import (
    GLOBAL_BODY,
    GLOBAL_TAG,
    HABIT_BODY_TEMPLATE,
    HABIT_TAG_PREFIX,
    NOTIFICATION_TITLE,
)


@dataclass(frozen=True)
class NotificationPayload:
    """What a fired reminder shows. ``tag`` coalesces repeats per scope."""

    title: str
    body: str
    tag: str

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)


def habit_tag(habit_id: str) -> str:
    return f"{HABIT_TAG_PREFIX}{habit_id}"


def format_habit_reminder(habit_id: str, habit_name: str) -> NotificationPayload:
    """Build the payload for a per-habit reminder."""
    return NotificationPayload(
        title=NOTIFICATION_TITLE,
        body=HABIT_BODY_TEMPLATE.format(habit_name=habit_name),
        tag=habit_tag(habit_id),
    )


def format_global_reminder() -> NotificationPayload:
    """Build the payload for the global "track your habits" reminder."""
    return NotificationPayload(title=NOTIFICATION_TITLE, body=GLOBAL_BODY, tag=GLOBAL_TAG)
