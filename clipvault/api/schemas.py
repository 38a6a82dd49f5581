"""Pydantic request/response schemas for the ClipVault HTTP API.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# FastAPI validates incoming JSON against the request models (422 with
# details on a shape mismatch) and serialises responses through the
# ``response_model`` of each route.  Request schemas end with "Request",
# response schemas end with "Response".
#
# CreateClipRequest is the wire form of IngestRequest: identical fields,
# except the file bytes travel base64-encoded under ``base64Data``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from clipvault.models.clip import Clip, FileType


class CreateClipRequest(BaseModel):
    """Body of ``POST /api/clips``: a clip analysed on the client side."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1)
    file_type: FileType
    file_size: int = Field(..., ge=0)
    base64_data: str = Field(..., alias="base64Data", description="File bytes, base64 encoded.")
    ai_summary: str = Field(..., min_length=1)
    ai_tags: list[str]
    ai_category: str | None = None
    extracted_text: str | None = None


class ClipResponse(BaseModel):
    """A stored clip as returned to clients; ``ai_tags`` is always a list."""

    id: str
    filename: str
    file_type: FileType
    file_size: int
    storage_path: str
    thumbnail_url: str | None = None
    ai_summary: str
    ai_tags: list[str] = Field(default_factory=list)
    ai_category: str | None = None
    extracted_text: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_clip(cls, clip: Clip) -> ClipResponse:
        return cls(**clip.model_dump())


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    clip_count: int
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body.

    ``error`` is the human-readable message (``"Clip not found"``),
    ``detail`` names the error class.
    """

    error: str
    detail: str | None = None
