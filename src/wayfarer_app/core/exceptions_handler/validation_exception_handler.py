from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError
import logging
from wayfarer_app.core.exceptions_handler.http_exception_handler import error_response

logger = logging.getLogger(__name__)


def _error_path(loc) -> str:
    # Drop the "body"/"query" prefix FastAPI puts in front of field names
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts)


async def validation_exception_handler(_: Request, exc: Exception):
    """
    Schema validation failures (request bodies, query params, or models
    built inside a handler) are reported as 400 with one entry per field.
    """
    if isinstance(exc, (RequestValidationError, ValidationError)):
        error_messages = [
            {"path": _error_path(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
    else:
        error_messages = [{"path": "", "message": str(exc)}]

    message = ", ".join(e["message"] for e in error_messages) or "Validation Error"
    logger.warning(f"Validation Error: {message}")
    return error_response(status.HTTP_400_BAD_REQUEST, message, error_messages)


async def duplicate_key_exception_handler(_: Request, exc: Exception):
    """Unique index violations from Mongo become 409 Conflict."""
    key_value = {}
    if isinstance(exc, DuplicateKeyError) and exc.details:
        key_value = exc.details.get("keyValue") or {}

    path = next(iter(key_value), "unknown")
    logger.warning(f"Duplicate key on {path}")
    return error_response(
        status.HTTP_409_CONFLICT,
        f"{path} already exists",
        [{"path": path, "message": f"{path} already exists"}],
    )
