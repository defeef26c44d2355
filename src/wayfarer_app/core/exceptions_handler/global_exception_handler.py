from fastapi import Request, status
import logging
from wayfarer_app.core.exceptions_handler.http_exception_handler import error_response

logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception):
    """Last resort for anything the other handlers did not claim."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)

    # Stack details stay out of production responses
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected internal server error occurred. Please contact support.",
        error_details=str(exc) if request.app.debug else None,
    )
