"""ClipVault API layer: routes, schemas and middleware."""

from clipvault.api.middleware import (
    BodySizeLimitMiddleware,
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from clipvault.api.routes import router
from clipvault.api.schemas import (
    ClipResponse,
    CreateClipRequest,
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
)

__all__ = [
    "BodySizeLimitMiddleware",
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "register_exception_handlers",
    "router",
    "ClipResponse",
    "CreateClipRequest",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
]
