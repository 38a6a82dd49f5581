"""Utility modules for ClipVault.

- **errors** -- Domain exception hierarchy rooted at ClipVaultError; each
  class declares the HTTP status it maps to at the API boundary.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_extraction** -- plain-text extraction from text files and PDFs.
"""

from clipvault.utils.errors import (
    AnalysisError,
    ClipVaultError,
    ConfigurationError,
    DuplicateKeyError,
    LLMError,
    NotFoundError,
    PayloadTooLargeError,
    ServiceUnavailableError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from clipvault.utils.logging import configure_logging, get_logger

__all__ = [
    "AnalysisError",
    "ClipVaultError",
    "ConfigurationError",
    "DuplicateKeyError",
    "LLMError",
    "NotFoundError",
    "PayloadTooLargeError",
    "ServiceUnavailableError",
    "StorageReadError",
    "StorageWriteError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
