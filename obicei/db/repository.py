"""Database repository - all SQL queries."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List

import aiosqlite

from obicei.db.models import (
    DueReminder,
    Habit,
    PushSubscriptionRecord,
    Session,
    User,
    UserSettings,
)

logger = logging.getLogger(__name__)


class Repository:
    """Database access layer."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # User operations

    async def create_user(self, email: str) -> User:
        """Create a new user."""
        async with self.db.execute(
            "INSERT INTO users (email) VALUES (?) RETURNING *", (email,)
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()
        logger.info(f"Created user {row['id']}")
        return User(
            id=row["id"],
            email=row["email"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # Session operations

    async def create_session(self, user_id: int, token: str, expires_at: int) -> Session:
        """Store a session issued by the auth service."""
        await self.db.execute(
            "INSERT INTO sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
            (token, user_id, expires_at),
        )
        await self.db.commit()
        return Session(token=token, user_id=user_id, expires_at=expires_at)

    async def get_session_user_id(self, token: str, now: int) -> int | None:
        """Resolve a session token to its user, ignoring expired sessions."""
        async with self.db.execute(
            "SELECT user_id FROM sessions WHERE token = ? AND expires_at >= ?",
            (token, now),
        ) as cursor:
            row = await cursor.fetchone()
            return row["user_id"] if row else None

    async def delete_expired_sessions(self, now: int) -> int:
        """Delete sessions that expired before ``now`` (Unix seconds)."""
        cursor = await self.db.execute("DELETE FROM sessions WHERE expires_at < ?", (now,))
        await self.db.commit()
        return cursor.rowcount

    # Rate-limit bookkeeping

    async def record_auth_attempt(self, ip: str, endpoint: str, attempted_at: int) -> None:
        """Record an authentication attempt for rate limiting."""
        await self.db.execute(
            "INSERT INTO auth_attempts (ip, endpoint, attempted_at) VALUES (?, ?, ?)",
            (ip, endpoint, attempted_at),
        )
        await self.db.commit()

    async def count_auth_attempts(self, ip: str, endpoint: str, since: int) -> int:
        """Count attempts from ``ip`` on ``endpoint`` since a Unix timestamp."""
        async with self.db.execute(
            """
            SELECT COUNT(*) AS cnt FROM auth_attempts
            WHERE ip = ? AND endpoint = ? AND attempted_at >= ?
            """,
            (ip, endpoint, since),
        ) as cursor:
            row = await cursor.fetchone()
            return row["cnt"]

    async def cleanup_old_auth_attempts(self, now: int, window_seconds: int) -> int:
        """Delete attempts older than the rate-limit window."""
        cutoff = now - window_seconds
        cursor = await self.db.execute(
            "DELETE FROM auth_attempts WHERE attempted_at < ?", (cutoff,)
        )
        await self.db.commit()
        return cursor.rowcount

    # Habit operations

    async def create_habit(self, habit: Habit) -> Habit:
        """Create a new habit."""
        async with self.db.execute(
            """
            INSERT INTO habits (
                id, user_id, name, reminder_enabled, reminder_hour,
                reminder_minute, is_archived
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            RETURNING *
            """,
            (
                habit.id,
                habit.user_id,
                habit.name,
                1 if habit.reminder_enabled else 0,
                habit.reminder_hour,
                habit.reminder_minute,
                1 if habit.is_archived else 0,
            ),
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()
        return self._row_to_habit(row)

    async def get_habit(self, user_id: int, habit_id: str) -> Habit | None:
        """Get one of a user's habits."""
        async with self.db.execute(
            "SELECT * FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_habit(row)
            return None

    async def get_habits_by_user(self, user_id: int) -> List[Habit]:
        """Get all habits for a user."""
        async with self.db.execute(
            "SELECT * FROM habits WHERE user_id = ? ORDER BY created_at, id",
            (user_id,),
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_habit(row) for row in rows]

    async def update_habit(self, habit: Habit) -> None:
        """Update a habit."""
        await self.db.execute(
            """
            UPDATE habits SET
                name = ?,
                reminder_enabled = ?,
                reminder_hour = ?,
                reminder_minute = ?,
                is_archived = ?
            WHERE id = ? AND user_id = ?
            """,
            (
                habit.name,
                1 if habit.reminder_enabled else 0,
                habit.reminder_hour,
                habit.reminder_minute,
                1 if habit.is_archived else 0,
                habit.id,
                habit.user_id,
            ),
        )
        await self.db.commit()

    async def enable_habit_reminder(
        self, user_id: int, habit_id: str, hour: int, minute: int
    ) -> bool:
        """Turn on a habit's reminder at a UTC time. False if not found."""
        cursor = await self.db.execute(
            """
            UPDATE habits SET reminder_enabled = 1, reminder_hour = ?, reminder_minute = ?
            WHERE id = ? AND user_id = ?
            """,
            (hour, minute, habit_id, user_id),
        )
        await self.db.commit()
        return cursor.rowcount > 0

    async def delete_habit(self, user_id: int, habit_id: str) -> bool:
        """Delete a habit. False if not found."""
        cursor = await self.db.execute(
            "DELETE FROM habits WHERE id = ? AND user_id = ?", (habit_id, user_id)
        )
        await self.db.commit()
        return cursor.rowcount > 0

    # Settings operations

    async def get_settings(self, user_id: int) -> UserSettings:
        """Get a user's settings, falling back to defaults."""
        async with self.db.execute(
            "SELECT * FROM user_settings WHERE user_id = ?", (user_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if not row:
                return UserSettings(user_id=user_id)
            return UserSettings(
                user_id=row["user_id"],
                global_reminder_enabled=bool(row["global_reminder_enabled"]),
                global_reminder_hour=row["global_reminder_hour"],
                global_reminder_minute=row["global_reminder_minute"],
            )

    async def upsert_settings(self, settings: UserSettings) -> None:
        """Insert or replace a user's settings."""
        await self.db.execute(
            """
            INSERT INTO user_settings (
                user_id, global_reminder_enabled, global_reminder_hour, global_reminder_minute
            ) VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                global_reminder_enabled = excluded.global_reminder_enabled,
                global_reminder_hour = excluded.global_reminder_hour,
                global_reminder_minute = excluded.global_reminder_minute
            """,
            (
                settings.user_id,
                1 if settings.global_reminder_enabled else 0,
                settings.global_reminder_hour,
                settings.global_reminder_minute,
            ),
        )
        await self.db.commit()

    # Push subscription operations

    async def upsert_push_subscription(self, record: PushSubscriptionRecord) -> None:
        """Create or overwrite a subscription, keyed on its endpoint."""
        await self.db.execute(
            """
            INSERT INTO push_subscriptions (user_id, endpoint, p256dh, auth)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(endpoint) DO UPDATE SET
                p256dh = excluded.p256dh,
                auth = excluded.auth,
                user_id = excluded.user_id,
                updated_at = datetime('now')
            """,
            (record.user_id, record.endpoint, record.p256dh, record.auth),
        )
        await self.db.commit()

    async def get_push_subscriptions(self, user_id: int) -> List[PushSubscriptionRecord]:
        """Get all subscriptions owned by a user."""
        async with self.db.execute(
            "SELECT * FROM push_subscriptions WHERE user_id = ? ORDER BY id", (user_id,)
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_subscription(row) for row in rows]

    async def delete_push_subscription(self, endpoint: str) -> None:
        """Delete a subscription by endpoint."""
        await self.db.execute("DELETE FROM push_subscriptions WHERE endpoint = ?", (endpoint,))
        await self.db.commit()

    async def delete_push_subscriptions_for_user(self, user_id: int) -> int:
        """Delete every subscription a user owns."""
        cursor = await self.db.execute(
            "DELETE FROM push_subscriptions WHERE user_id = ?", (user_id,)
        )
        await self.db.commit()
        return cursor.rowcount

    # Scheduler queries

    async def get_due_habit_reminders(self, hour: int, minute: int) -> List[DueReminder]:
        """Enabled habit reminders at exactly hour:minute UTC, per subscription."""
        async with self.db.execute(
            """
            SELECT h.id AS habit_id, h.name AS habit_name,
                   ps.user_id, ps.endpoint, ps.p256dh, ps.auth
            FROM habits h
            JOIN push_subscriptions ps ON ps.user_id = h.user_id
            WHERE h.reminder_enabled = 1
              AND h.reminder_hour = ?
              AND h.reminder_minute = ?
              AND h.is_archived = 0
            ORDER BY ps.id, h.id
            """,
            (hour, minute),
        ) as cursor:
            rows = await cursor.fetchall()
            return [
                DueReminder(
                    subscription=self._row_to_subscription(row),
                    habit_id=row["habit_id"],
                    habit_name=row["habit_name"],
                )
                for row in rows
            ]

    async def get_due_global_reminders(self, hour: int, minute: int) -> List[DueReminder]:
        """Enabled global reminders at exactly hour:minute UTC, per subscription."""
        async with self.db.execute(
            """
            SELECT ps.user_id, ps.endpoint, ps.p256dh, ps.auth
            FROM user_settings us
            JOIN push_subscriptions ps ON ps.user_id = us.user_id
            WHERE us.global_reminder_enabled = 1
              AND us.global_reminder_hour = ?
              AND us.global_reminder_minute = ?
            ORDER BY ps.id
            """,
            (hour, minute),
        ) as cursor:
            rows = await cursor.fetchall()
            return [DueReminder(subscription=self._row_to_subscription(row)) for row in rows]

    # Helper methods

    def _row_to_habit(self, row: aiosqlite.Row) -> Habit:
        """Convert a database row to a Habit object."""
        return Habit(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            reminder_enabled=bool(row["reminder_enabled"]),
            reminder_hour=row["reminder_hour"],
            reminder_minute=row["reminder_minute"],
            is_archived=bool(row["is_archived"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_subscription(self, row: aiosqlite.Row) -> PushSubscriptionRecord:
        """Convert a database row to a PushSubscriptionRecord."""
        return PushSubscriptionRecord(
            endpoint=row["endpoint"],
            p256dh=row["p256dh"],
            auth=row["auth"],
            user_id=row["user_id"],
        )
