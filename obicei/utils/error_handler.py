"""Global error handler for the API."""

import logging
import traceback

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


async def error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught errors in request handlers."""
    # Log the error
    logger.error(f"Exception while handling {request.method} {request.url.path}:", exc_info=exc)

    # Log full traceback
    tb_string = "".join(traceback.format_exception(None, exc, exc.__traceback__))
    logger.debug(f"Traceback:\n{tb_string}")

    message = "Internal server error"
    if "database is locked" in str(exc):
        message = "Server busy, please try again in a moment"

    return JSONResponse(status_code=500, content={"error": message})
