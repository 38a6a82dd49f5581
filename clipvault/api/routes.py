"""FastAPI routes for ClipVault.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.  Domain errors raised by the
service propagate to ErrorHandlingMiddleware, which maps them to JSON.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                 Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/clips               GET     Search clips (?query=&type=), newest first
# /api/clips               POST    Store a client-analysed clip (base64 body)
# /api/clips/upload        POST    Multipart upload with server-side analysis
# /api/clips/{clip_id}     GET     Fetch one clip
# /api/clips/{clip_id}     DELETE  Remove a clip and its blob
# /api/health              GET     Health check + provider status
#
# Stored blobs are served separately as static files under the public
# upload prefix (``/uploads`` by default), see clipvault/main.py.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import base64
import binascii
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, UploadFile

from clipvault.api.schemas import (
    ClipResponse,
    CreateClipRequest,
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
)
from clipvault.config.settings import Settings
from clipvault.interfaces.clip_repository import IClipRepository
from clipvault.models.clip import FileType
from clipvault.services.clip_service import ClipService
from clipvault.utils.errors import PayloadTooLargeError, ServiceUnavailableError, ValidationError
from clipvault.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_VERSION = "0.1.0"

# Multipart uploads are read in 64 KB increments so an oversized file is
# rejected without buffering all of it.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_clip_service(request: Request) -> ClipService:
    return request.app.state.clip_service


def _get_repository(request: Request) -> IClipRepository:
    return request.app.state.clip_repository


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_providers(request: Request) -> dict[str, Any]:
    return request.app.state.provider_info


ClipServiceDep = Annotated[ClipService, Depends(_get_clip_service)]
RepositoryDep = Annotated[IClipRepository, Depends(_get_repository)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]
ProvidersDep = Annotated[dict[str, Any], Depends(_get_providers)]


def _decode_base64(payload: str) -> bytes:
    # Browsers' FileReader produces data URLs; accept them as well.
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(message="base64Data is not valid base64") from exc


# ---------------------------------------------------------------------------
# Clips
# ---------------------------------------------------------------------------


@router.get("/clips", response_model=list[ClipResponse])
async def list_clips(
    service: ClipServiceDep,
    query: Annotated[str | None, Query(description="Case-insensitive substring")] = None,
    file_type: Annotated[FileType | None, Query(alias="type")] = None,
) -> list[ClipResponse]:
    """Return every clip matching the filters, newest first."""
    clips = await service.search(query=query, file_type=file_type)
    return [ClipResponse.from_clip(clip) for clip in clips]


@router.post(
    "/clips",
    status_code=201,
    response_model=SuccessResponse,
    responses=_ERROR_RESPONSES,
)
async def create_clip(body: CreateClipRequest, service: ClipServiceDep) -> SuccessResponse:
    """Store a clip whose analysis was done by the client."""
    fields = body.model_dump(exclude={"base64_data"})
    fields["data"] = _decode_base64(body.base64_data)
    # Domain checks (safe filename, non-blank summary) run in ClipService.
    await service.ingest(fields)
    return SuccessResponse()


@router.post(
    "/clips/upload",
    status_code=201,
    response_model=ClipResponse,
    responses={
        **_ERROR_RESPONSES,
        413: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def upload_clip(
    file: UploadFile,
    service: ClipServiceDep,
    settings: SettingsDep,
) -> ClipResponse:
    """Accept a raw file, analyse it server-side and store it."""
    if not service.analysis_enabled:
        raise ServiceUnavailableError(
            message="Server-side analysis is not configured (no LLM API key)"
        )
    if not file.filename:
        raise ValidationError(message="Uploaded file has no filename")

    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > settings.max_file_size:
            raise PayloadTooLargeError(
                message=f"File too large: limit is {settings.max_file_size} bytes"
            )
        chunks.append(chunk)
    data = b"".join(chunks)

    clip = await service.analyze_and_ingest(file.filename, file.content_type, data)
    _logger.info("clip_uploaded", clip_id=clip.id, size=total_size)
    return ClipResponse.from_clip(clip)


@router.get("/clips/{clip_id}", response_model=ClipResponse, responses=_ERROR_RESPONSES)
async def get_clip(clip_id: str, service: ClipServiceDep) -> ClipResponse:
    return ClipResponse.from_clip(await service.get(clip_id))


@router.delete("/clips/{clip_id}", response_model=SuccessResponse, responses=_ERROR_RESPONSES)
async def delete_clip(clip_id: str, service: ClipServiceDep) -> SuccessResponse:
    """Delete a clip's blob, then its row.  404 when the id is unknown."""
    await service.remove(clip_id)
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health(repository: RepositoryDep, providers: ProvidersDep) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=_VERSION,
        clip_count=await repository.count(),
        providers=providers,
    )
