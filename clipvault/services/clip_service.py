"""Clip orchestrator: ingest, search, lookup and removal of clips.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: IClipRepository, IBlobStore, AnalysisService (optional).
#
# ClipService is the only component that touches both stores.  There is
# no transaction spanning them, so the order of the two writes defines
# what a crash can leave behind:
#
#   INGEST  blob put -> row insert.  An insert failure deletes the blob
#           again (best effort) before the error propagates, so a failed
#           ingest never leaves a listable row without a blob.
#   REMOVE  blob delete -> row delete.  A crash in between leaves at
#           worst a row whose blob is already gone; deleting it again is
#           a no-op on the blob side.
#
# Concurrent ingests of the same id are serialised by the repository's
# primary key.  Blobs are written with overwrite=False, so a racing
# request with the same storage key fails at the blob write and can never
# replace the bytes of the clip that wins the row.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from clipvault.interfaces.blob_store import IBlobStore
from clipvault.interfaces.clip_repository import IClipRepository
from clipvault.models.clip import Clip, ClipFilter, FileType, IngestRequest
from clipvault.services.analysis_service import AnalysisService
from clipvault.utils.errors import (
    ClipVaultError,
    ConfigurationError,
    DuplicateKeyError,
    NotFoundError,
    ValidationError,
)
from clipvault.utils.text_extraction import extract_text

logger = structlog.get_logger(logger_name=__name__)


def _describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into ``field: message; field: message``."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "request"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ClipService:
    """Coordinates the blob store and clip repository for every clip operation.

    All dependencies are constructor-injected.  ``analysis`` is only needed
    by :meth:`analyze_and_ingest`; without it the service still accepts
    clips whose metadata was produced elsewhere.
    """

    def __init__(
        self,
        repository: IClipRepository,
        blob_store: IBlobStore,
        analysis: AnalysisService | None = None,
    ) -> None:
        self._repository = repository
        self._blob_store = blob_store
        self._analysis = analysis

    @property
    def analysis_enabled(self) -> bool:
        return self._analysis is not None

    # ── Public API ─────────────────────────────────────────────────────

    async def ingest(self, request: IngestRequest | Mapping[str, Any]) -> Clip:
        """Store one clip: blob first, then its metadata row.

        Parameters
        ----------
        request:
            A validated :class:`IngestRequest`, or a mapping that is
            validated into one.  Unknown keys are rejected.

        Returns
        -------
        Clip
            The stored clip, including ``thumbnail_url`` and ``created_at``.

        Raises
        ------
        ValidationError
            Missing or malformed fields.  Raised before any I/O.
        DuplicateKeyError
            The id or its storage key is already taken.  No blob is
            written or replaced.
        StorageWriteError
            The blob write failed.  No row is inserted.
        """
        req = self._coerce_request(request)
        storage_path = req.storage_path

        if await self._repository.get_storage_path(req.id) is not None:
            raise DuplicateKeyError(
                message=f"Clip id already exists: {req.id}",
                provider_name=self._repository.get_provider_name(),
            )

        address = await self._blob_store.put(storage_path, req.data, overwrite=False)
        thumbnail_url = address if req.file_type is FileType.IMAGE else None

        clip = Clip(
            id=req.id,
            filename=req.filename,
            file_type=req.file_type,
            file_size=req.file_size,
            storage_path=storage_path,
            thumbnail_url=thumbnail_url,
            ai_summary=req.ai_summary,
            ai_tags=list(req.ai_tags),
            ai_category=req.ai_category,
            extracted_text=req.extracted_text,
        )

        try:
            stored = await self._repository.insert(clip)
        except Exception as exc:
            await self._discard_orphan(clip, exc)
            raise

        logger.info(
            "clip_ingested",
            clip_id=stored.id,
            file_type=stored.file_type.value,
            file_size=stored.file_size,
            storage_path=storage_path,
        )
        return stored

    async def search(
        self,
        query: str | None = None,
        file_type: FileType | str | None = None,
    ) -> list[Clip]:
        """Return clips matching ``file_type`` AND ``query``, newest first.

        Raises ``ValidationError`` for an unknown ``file_type`` string.
        """
        if isinstance(file_type, str) and not isinstance(file_type, FileType):
            try:
                file_type = FileType(file_type)
            except ValueError as exc:
                raise ValidationError(message=f"Unknown file type: {file_type!r}") from exc

        clips = await self._repository.list_clips(ClipFilter(query=query, file_type=file_type))
        logger.debug(
            "clips_searched",
            query=query,
            file_type=file_type.value if file_type else None,
            results=len(clips),
        )
        return clips

    async def get(self, clip_id: str) -> Clip:
        clip = await self._repository.get(clip_id)
        if clip is None:
            raise NotFoundError(provider_name=self._repository.get_provider_name())
        return clip

    async def remove(self, clip_id: str) -> None:
        """Delete a clip's blob, then its row.

        Raises ``NotFoundError`` when no row exists for ``clip_id``.
        """
        storage_path = await self._repository.get_storage_path(clip_id)
        if storage_path is None:
            raise NotFoundError(provider_name=self._repository.get_provider_name())

        await self._blob_store.delete(storage_path)
        await self._repository.delete(clip_id)
        logger.info("clip_removed", clip_id=clip_id, storage_path=storage_path)

    async def analyze_and_ingest(
        self,
        filename: str,
        content_type: str | None,
        data: bytes,
    ) -> Clip:
        """Classify, extract, analyse and store a raw upload.

        A fresh UUID4 id is assigned.  Analysis runs before anything is
        written, so an ``AnalysisError`` leaves both stores untouched.
        """
        if self._analysis is None:
            raise ConfigurationError(
                message="Server-side analysis requires an LLM API key "
                "(ANTHROPIC_API_KEY or OPENAI_API_KEY)"
            )

        file_type = FileType.from_mime(content_type)
        extracted = await asyncio.to_thread(extract_text, file_type, data)
        result = await self._analysis.analyze(file_type, data, extracted)

        request = self._coerce_request(
            {
                "filename": filename,
                "file_type": file_type,
                "file_size": len(data),
                "data": data,
                "ai_summary": result.summary,
                "ai_tags": result.tags,
                "ai_category": result.category,
                "extracted_text": extracted,
            }
        )
        return await self.ingest(request)

    # ── Internals ──────────────────────────────────────────────────────

    @staticmethod
    def _coerce_request(request: IngestRequest | Mapping[str, Any]) -> IngestRequest:
        if isinstance(request, IngestRequest):
            return request
        try:
            return IngestRequest.model_validate(dict(request))
        except PydanticValidationError as exc:
            raise ValidationError(message=_describe_validation_error(exc)) from exc

    async def _discard_orphan(self, clip: Clip, cause: Exception) -> None:
        """Best-effort removal of a blob whose row was never inserted.

        The blob was created by this request (write-once), so it is never
        another clip's.
        """
        try:
            await self._blob_store.delete(clip.storage_path)
        except ClipVaultError as cleanup_exc:
            logger.error(
                "orphan_blob_cleanup_failed",
                clip_id=clip.id,
                storage_path=clip.storage_path,
                error=str(cleanup_exc),
                cause=str(cause),
            )
        else:
            logger.warning(
                "orphan_blob_removed",
                clip_id=clip.id,
                storage_path=clip.storage_path,
                cause=str(cause),
            )
