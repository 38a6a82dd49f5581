"""Custom exception hierarchy for ClipVault.

All application exceptions inherit from :class:`ClipVaultError`, which
carries an optional ``provider_name`` so error handlers can identify which
backend (e.g. "sqlite_clips", "local_blob", "openai") caused the failure.

The hierarchy is organized by where the failure originates:

    ClipVaultError  (base -- catch-all for any ClipVault error)
    +-- ValidationError        (missing / malformed request fields)
    +-- DuplicateKeyError      (clip id already exists)
    +-- NotFoundError          (lookup or delete of an absent clip)
    +-- PayloadTooLargeError   (uploaded file over the per-file limit)
    +-- StorageWriteError      (blob write failure, quota exhaustion)
    +-- StorageReadError       (blob read failure, corrupt stored row)
    +-- AnalysisError          (summary / tag / category generation failed)
    +-- LLMError               (any LLM API call failure)
    +-- ConfigurationError     (startup / missing config)
    +-- ServiceUnavailableError (optional backend not configured)

Every class declares the HTTP ``status_code`` it maps to at the API
boundary.  Client-caused errors are 4xx, storage and external-service
errors are 5xx.
"""


class ClipVaultError(Exception):
    """Base exception for all ClipVault errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which backend triggered the error.
    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[local_blob] Disk quota exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client-caused errors
# ---------------------------------------------------------------------------

class ValidationError(ClipVaultError):
    """Raised when a request is missing required fields or has malformed ones."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid clip data",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DuplicateKeyError(ClipVaultError):
    """Raised when a clip is inserted with an id that already exists."""

    status_code = 409

    def __init__(
        self,
        message: str = "Clip id already exists",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(ClipVaultError):
    """Raised when a clip lookup or delete targets an id that does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "Clip not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PayloadTooLargeError(ClipVaultError):
    """Raised when an uploaded file exceeds the per-file size limit."""

    status_code = 413

    def __init__(
        self,
        message: str = "File too large",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class StorageWriteError(ClipVaultError):
    """Raised when blob bytes cannot be written (I/O failure, quota, bad key)."""

    def __init__(
        self,
        message: str = "Failed to write blob",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageReadError(ClipVaultError):
    """Raised when a blob or a stored row cannot be read back."""

    def __init__(
        self,
        message: str = "Failed to read from storage",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class AnalysisError(ClipVaultError):
    """Raised when the AI analysis step fails or returns unusable output.

    An upload that hits this error is aborted before any blob or row is
    written.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Content analysis failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(ClipVaultError):
    """Raised when an LLM API call fails or returns an empty response."""

    status_code = 502

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(ClipVaultError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ServiceUnavailableError(ClipVaultError):
    """Raised when a route needs a backend this deployment didn't configure."""

    status_code = 503

    def __init__(
        self,
        message: str = "Service unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
