"""Configuration management from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Database
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "./data/obicei.db"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # Push scheduler
    PUSH_TTL: int = int(os.getenv("PUSH_TTL", "3600"))
    RATE_LIMIT_WINDOW: int = int(os.getenv("RATE_LIMIT_WINDOW", "3600"))

    # VAPID
    VAPID_PUBLIC_KEY: str = os.getenv("VAPID_PUBLIC_KEY", "")
    VAPID_PRIVATE_KEY: str = os.getenv("VAPID_PRIVATE_KEY", "")
    VAPID_SUBJECT: str = os.getenv("VAPID_SUBJECT", "mailto:noreply@obicei.app")
    VAPID_KEYS_PATH: Path = Path(os.getenv("VAPID_KEYS_PATH", "./data/vapid.json"))

    # Client
    SERVER_URL: str = os.getenv("SERVER_URL", "http://localhost:3000")
    SESSION_TOKEN: str = os.getenv("SESSION_TOKEN", "")
    CLIENT_STORE_PATH: Path = Path(os.getenv("CLIENT_STORE_PATH", "./data/client.json"))
    LOCAL_TIMEZONE: str | None = os.getenv("LOCAL_TIMEZONE") or None
    SYNC_DEBOUNCE_MS: int = int(os.getenv("SYNC_DEBOUNCE_MS", "500"))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.VAPID_SUBJECT.startswith(("mailto:", "https:")):
            raise ValueError("VAPID_SUBJECT must be a mailto: or https: URL")

        if bool(cls.VAPID_PUBLIC_KEY) != bool(cls.VAPID_PRIVATE_KEY):
            raise ValueError(
                "VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY must be set together"
            )

        # Ensure data directories exist
        cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
        cls.VAPID_KEYS_PATH.parent.mkdir(parents=True, exist_ok=True)
