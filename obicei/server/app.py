"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from obicei.config import Config
from obicei.db.migrations import run_migrations
from obicei.db.repository import Repository
from obicei.server.routes import router
from obicei.server.scheduler import start_push_scheduler
from obicei.server.vapid import get_vapid_keys
from obicei.server.webpush_sender import PushSender
from obicei.utils.error_handler import error_handler

logger = logging.getLogger(__name__)


def create_app(
    db_path: Path | None = None,
    vapid_keys_path: Path | None = None,
    run_scheduler: bool = True,
) -> FastAPI:
    """Build the API.

    Args:
        db_path: SQLite database, defaults to Config.DATABASE_PATH
        vapid_keys_path: VAPID key file, defaults to Config.VAPID_KEYS_PATH
        run_scheduler: Start the once-a-minute push job with the app
    """
    db_path = db_path or Config.DATABASE_PATH
    vapid_keys_path = vapid_keys_path or Config.VAPID_KEYS_PATH

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Initialize database
        await run_migrations(db_path)
        repo = Repository(db_path)
        await repo.connect()
        app.state.repo = repo

        app.state.vapid = get_vapid_keys(
            vapid_keys_path,
            Config.VAPID_SUBJECT,
            Config.VAPID_PUBLIC_KEY,
            Config.VAPID_PRIVATE_KEY,
        )

        scheduler = None
        if run_scheduler:
            sender = PushSender(app.state.vapid, ttl=Config.PUSH_TTL)
            scheduler = start_push_scheduler(repo, sender, Config.RATE_LIMIT_WINDOW)

        logger.info("obicei server initialized successfully")
        try:
            yield
        finally:
            if scheduler:
                scheduler.shutdown(wait=False)
            await repo.close()
            logger.info("obicei server shut down")

    app = FastAPI(title="obicei", lifespan=lifespan)
    app.include_router(router)
    app.add_exception_handler(Exception, error_handler)
    return app
