"""Error envelope and exception handlers for the public API.

Every failure answers with the same body::

    {"success": false, "error": "<message>"}

Status codes come from the error taxonomy in ``detectsecure.errors``:
400 for caller mistakes, 500 for configuration, store and unexpected
failures. Request-body validation failures raised by FastAPI itself are
folded into the same 400 envelope.

Route handlers run their service call through ``guarded()`` so an unexpected
exception still reaches the caller as a 500 with its message instead of
escaping to the server.
"""

from __future__ import annotations

from typing import Awaitable, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from detectsecure.errors import DetectSecureError, InternalError
from detectsecure.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def build_error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


async def guarded(operation: str, awaitable: Awaitable[T]) -> T:
    """Await a service call, converting unexpected exceptions to InternalError."""
    try:
        return await awaitable
    except DetectSecureError:
        raise
    except Exception as exc:
        logger.error(
            "unexpected_error",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise InternalError(str(exc) or type(exc).__name__) from exc


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "invalid value")
    return f"invalid request: {location}: {detail}" if location else f"invalid request: {detail}"


def install_error_handlers(application: FastAPI) -> None:
    """Register the envelope handlers on ``application``."""

    @application.exception_handler(DetectSecureError)
    async def detectsecure_error_handler(
        request: Request, exc: DetectSecureError
    ) -> JSONResponse:
        log_method = logger.warning if exc.status_code < 500 else logger.error
        log_method(
            "request_failed",
            status_code=exc.status_code,
            error=exc.message,
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return build_error_response(exc.message, exc.status_code)

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.warning("request_invalid", error=message, path=str(request.url.path))
        return build_error_response(message, 400)

    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return build_error_response(str(exc.detail), exc.status_code)

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return build_error_response(str(exc) or "Internal server error", 500)
