"""Clip domain models: one uploaded artifact plus its AI-derived metadata.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph; no imports from upper layers).
#
# Key design decisions:
#   - **Structured tags in memory**: ``Clip.ai_tags`` is always an ordered
#     ``list[str]``.  The JSON text form only exists inside the repository
#     (see clipvault/providers/clips/tag_codec.py).
#   - **Closed ingest input**: ``IngestRequest`` forbids unknown fields so
#     malformed uploads are rejected before any storage I/O happens.
#   - **Immutable state**: All models use ``frozen=True``.  The repository
#     stamps ``created_at`` with ``model_copy(update={...})``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Characters that would let a filename escape the blob storage root once
# it is embedded in ``{id}-{filename}``.
_FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


# ─── FileType ─────────────────────────────────────────────────────────
class FileType(str, Enum):
    """Coarse content classes a clip can belong to."""

    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"

    @classmethod
    def from_mime(cls, content_type: str | None) -> FileType:
        """Classify a MIME type: ``image/*`` → image, PDF → pdf, anything else → text."""
        mime = (content_type or "").split(";", 1)[0].strip().lower()
        if mime.startswith("image/"):
            return cls.IMAGE
        if mime == "application/pdf":
            return cls.PDF
        return cls.TEXT


def _check_filename(value: str) -> str:
    if value in (".", ".."):
        raise ValueError("filename must not be a relative path component")
    if any(ch in value for ch in _FORBIDDEN_NAME_CHARS):
        raise ValueError("filename must not contain path separators")
    return value


def _check_not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


# ─── AnalysisResult ───────────────────────────────────────────────────
class AnalysisResult(BaseModel):
    """Output of the analysis adapter for a single file."""

    model_config = ConfigDict(frozen=True)

    summary: str = Field(min_length=1, description="Two or three sentence description.")
    tags: list[str] = Field(default_factory=list, description="Relevant keywords, in model order.")
    category: str | None = Field(default=None, description="Single-word category.")

    @field_validator("summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        return _check_not_blank(value)


# ─── IngestRequest ────────────────────────────────────────────────────
class IngestRequest(BaseModel):
    """Validated input of ClipService.ingest.

    The file bytes travel decoded; transport encodings (base64) are the
    API layer's concern.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique clip id; a UUID4 is generated when omitted.",
    )
    filename: str = Field(min_length=1, description="Original file name.")
    file_type: FileType
    file_size: int = Field(ge=0, description="Size of the original file in bytes.")
    data: bytes = Field(description="Raw file bytes.")
    ai_summary: str = Field(min_length=1)
    ai_tags: list[str]
    ai_category: str | None = None
    extracted_text: str | None = None

    @field_validator("id", "filename")
    @classmethod
    def _safe_path_component(cls, value: str) -> str:
        return _check_filename(value)

    @field_validator("ai_summary")
    @classmethod
    def _summary_not_blank(cls, value: str) -> str:
        return _check_not_blank(value)

    @property
    def storage_path(self) -> str:
        """Blob key for this clip, always ``{id}-{filename}``."""
        return f"{self.id}-{self.filename}"


# ─── Clip ─────────────────────────────────────────────────────────────
class Clip(BaseModel):
    """One persisted artifact.

    ``created_at`` is ``None`` until the repository assigns it on insert.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    filename: str
    file_type: FileType
    file_size: int = Field(ge=0)
    storage_path: str
    thumbnail_url: str | None = None
    ai_summary: str
    ai_tags: list[str] = Field(default_factory=list)
    ai_category: str | None = None
    extracted_text: str | None = None
    created_at: datetime | None = None


# ─── ClipFilter ───────────────────────────────────────────────────────
class ClipFilter(BaseModel):
    """Listing filter: exact ``file_type`` AND case-insensitive ``query`` substring."""

    model_config = ConfigDict(frozen=True)

    query: str | None = None
    file_type: FileType | None = None

    @field_validator("query")
    @classmethod
    def _empty_query_is_none(cls, value: str | None) -> str | None:
        return value or None
