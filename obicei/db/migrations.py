"""Database migration runner."""

import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Tuple

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def _initial_schema(db: aiosqlite.Connection) -> None:
    with open(SCHEMA_PATH) as f:
        schema_sql = f.read()
    await db.executescript(schema_sql)


# Ordered (version, step) pairs; append new steps, never edit applied ones.
MIGRATIONS: List[Tuple[int, Callable[[aiosqlite.Connection], Awaitable[None]]]] = [
    (1, _initial_schema),
]


async def get_schema_version(db: aiosqlite.Connection) -> int:
    async with db.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
        return row[0]


async def run_migrations(db_path: Path) -> int:
    """Apply pending migrations, tracked through SQLite's user_version.

    Returns:
        The schema version after migrating
    """
    async with aiosqlite.connect(db_path) as db:
        version = await get_schema_version(db)

        for target, step in MIGRATIONS:
            if target <= version:
                continue
            await step(db)
            await db.execute(f"PRAGMA user_version = {target}")
            await db.commit()
            logger.info(f"Migrated {db_path} to schema version {target}")
            version = target

        return version
