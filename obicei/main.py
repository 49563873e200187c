"""Main entry point for the obicei reminder server."""

import logging
import sys

import uvicorn

from obicei.config import Config
from obicei.server.app import create_app

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the server."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    app = create_app()

    logger.info(f"Starting obicei server on {Config.HOST}:{Config.PORT}...")
    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_config=None)


if __name__ == "__main__":
    main()
