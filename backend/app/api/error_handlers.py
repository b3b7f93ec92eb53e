"""FastAPI exception handlers mapping core errors onto HTTP responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mindgraph.errors import NotFoundError, RateLimitExceeded, ValidationFailure
from mindgraph.utils.time import now_ms

logger = logging.getLogger("mindgraph.api")


def _response(
    status_code: int,
    error: str,
    message: str,
    detail: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "detail": detail or None},
        headers=headers,
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _response(status.HTTP_404_NOT_FOUND, "not_found", exc.message, exc.details)


async def validation_failure_handler(
    request: Request, exc: ValidationFailure
) -> JSONResponse:
    return _response(
        422,
        "validation_error",
        exc.message,
        exc.details,
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = max(0, (exc.reset_at - now_ms() + 999) // 1000)
    return _response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "rate_limited",
        exc.message,
        exc.details,
        headers={"Retry-After": str(retry_after)},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _response(exc.status_code, "http_error", message)


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return _response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach shared exception handlers to the FastAPI application."""
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)


__all__ = ["register_error_handlers"]
