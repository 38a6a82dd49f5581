"""API middleware: body-size limit, CORS, request logging and error handling.

Converts ``ClipVaultError`` subclasses into JSON ``ErrorResponse`` bodies
carrying the status code each error class declares.  FastAPI's own
request-validation (422) and HTTP errors (unknown route, wrong method) are
rendered in the same ``{error, detail}`` shape by the handlers from
:func:`register_exception_handlers`.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed).  In
# clipvault/main.py:
#
#     app.add_middleware(ErrorHandlingMiddleware)    # innermost
#     app.add_middleware(BodySizeLimitMiddleware)
#     app.add_middleware(RequestLoggingMiddleware)   # outermost
#     configure_cors(app, ...)                       # wraps everything
#
#   Request flow:
#     Client → CORS → RequestLogging → BodySizeLimit → ErrorHandling → route
#
# RequestLoggingMiddleware therefore sees the final status code, including
# 413s from the size check and JSON errors produced by ErrorHandling.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from clipvault.api.schemas import ErrorResponse
from clipvault.utils.errors import ClipVaultError
from clipvault.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Defaults to ``["*"]``; production deployments pass the real origins
    via ``CORS_ORIGINS``.  Credentials are only allowed for an explicit
    origin list since browsers reject ``*`` with credentials.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Body size limit
# ---------------------------------------------------------------------------


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared ``Content-Length`` exceeds ``max_body_size``."""

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        super().__init__(app)
        self._max_body_size = max_body_size

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                return _error_response(400, "Invalid Content-Length header", "ValidationError")
            if size > self._max_body_size:
                _logger.warning(
                    "request_body_too_large",
                    path=str(request.url.path),
                    size=size,
                    limit=self._max_body_size,
                )
                return _error_response(
                    413,
                    f"Request body too large: {size} bytes (limit {self._max_body_size})",
                    "PayloadTooLargeError",
                )
        return await call_next(request)


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping a route into structured JSON errors.

    ``ClipVaultError`` subclasses keep their message and declared status.
    Anything else becomes a generic 500; stack traces stay in the logs.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except ClipVaultError as exc:
            log = _logger.warning if exc.status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            return _error_response(exc.status_code, exc.message, type(exc).__name__)
        except Exception:
            _logger.exception(
                "unhandled_error",
                method=request.method,
                path=str(request.url.path),
            )
            return _error_response(500, "Internal server error", "InternalError")


# ---------------------------------------------------------------------------
# Framework exception handlers
# ---------------------------------------------------------------------------


def _describe_request_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # Drop the leading "body" / "query" segment; clients know where they sent it.
        location = ".".join(str(part) for part in err.get("loc", ())[1:]) or "request"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "Invalid request: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Render FastAPI's validation and HTTP errors as ``ErrorResponse`` bodies."""

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _describe_request_errors(exc)
        _logger.warning("request_validation_failed", path=str(request.url.path), error=message)
        return _error_response(422, message, "RequestValidationError")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), "HTTPException")
