"""Exception handlers mapping errors onto the response envelope."""

import json
from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hamkar.config import settings
from hamkar.core.exceptions import AppError, UnauthorizedError, ValidationError

logger = structlog.get_logger(__name__)

SECRET_MARKERS = ("password", "token", "secret")
REDACTED = "[REDACTED]"


def error_body(message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


def format_validation_errors(errors) -> str:
    """Join pydantic error entries into one readable message."""
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    extra: Dict[str, Any] = {}
    if isinstance(exc, ValidationError) and exc.errors:
        extra["errors"] = exc.errors
    if isinstance(exc, UnauthorizedError):
        extra["reason"] = exc.reason
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, **extra))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", errors=format_validation_errors(exc.errors())),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


def redact(value: Any) -> Any:
    """Replace values under password, token or secret keys, at any depth."""
    if isinstance(value, dict):
        return {
            key: REDACTED if any(marker in str(key).lower() for marker in SECRET_MARKERS) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def request_body_for_log(request: Request) -> Optional[Any]:
    """JSON body captured by the body size middleware, redacted; None otherwise."""
    preview = getattr(request.state, "body_preview", None)
    if not preview or "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        return redact(json.loads(bytes(preview)))
    except ValueError:
        # Truncated or malformed
        return None


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(
        "unhandled_exception",
        method=request.method,
        url=str(request.url),
        path_params=dict(request.path_params),
        query=dict(request.query_params),
        body=request_body_for_log(request),
        account_id=getattr(request.state, "account_id", None),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", error=str(exc) if settings.DEBUG else None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
