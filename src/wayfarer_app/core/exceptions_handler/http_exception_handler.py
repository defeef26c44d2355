from typing import List, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    message: str,
    error_messages: Optional[List[dict]] = None,
    headers: Optional[dict] = None,
    **extra,
) -> JSONResponse:
    """Every error the API returns goes through here so clients see one shape."""
    content = {
        "status": "fail" if status_code >= 500 else "error",
        "code": status_code,
        "message": message,
        "errorMessages": error_messages or [],
        **extra,
    }
    return JSONResponse(status_code=status_code, content=content, headers=headers)


# Raised HTTPExceptions from services and auth (400, 401, 403, 404, 409)
async def http_exception_handler(_: Request, exc: Exception):
    if not isinstance(exc, StarletteHTTPException):
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected internal error occurred.")

    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {detail}")
    else:
        logger.info(f"HTTP {exc.status_code}: {detail}")

    return error_response(
        exc.status_code,
        detail,
        [{"path": "", "message": detail}] if detail else [],
        headers=getattr(exc, "headers", None),
    )
