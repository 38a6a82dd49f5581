"""Shared pytest fixtures for the ClipVault test suite."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from clipvault.interfaces.llm_provider import ILLMProvider
from clipvault.models.clip import FileType, IngestRequest
from clipvault.providers.blob.local_blob_store import LocalBlobStore
from clipvault.providers.clips.sqlite_clip_repository import SQLiteClipRepository
from clipvault.services.clip_service import ClipService

# Smallest valid PNG header + IHDR; enough for magic-byte sniffing.
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
)


class StepClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self._next = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self._next
        self._next = current + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop logging config that may point at a test's captured (closed) stream."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
async def repository(tmp_path: Path, clock: StepClock) -> SQLiteClipRepository:
    """Initialised SQLite repository in a temporary directory."""
    repo = SQLiteClipRepository(db_path=tmp_path / "clips.db", clock=clock)
    await repo.initialize()
    return repo


@pytest.fixture
async def blob_store(tmp_path: Path) -> LocalBlobStore:
    store = LocalBlobStore(root_dir=tmp_path / "uploads", public_prefix="/uploads")
    await store.initialize()
    return store


@pytest.fixture
def clip_service(repository: SQLiteClipRepository, blob_store: LocalBlobStore) -> ClipService:
    return ClipService(repository=repository, blob_store=blob_store)


@pytest.fixture
def make_request() -> Callable[..., IngestRequest]:
    """Factory for valid IngestRequests; keyword overrides replace defaults."""

    def _make(**overrides: Any) -> IngestRequest:
        fields: dict[str, Any] = {
            "id": "clip-1",
            "filename": "notes.txt",
            "file_type": FileType.TEXT,
            "file_size": 11,
            "data": b"hello world",
            "ai_summary": "A short note saying hello.",
            "ai_tags": ["greeting", "note"],
            "ai_category": "personal",
            "extracted_text": "hello world",
        }
        fields.update(overrides)
        return IngestRequest(**fields)

    return _make


@pytest.fixture
def mock_llm() -> MagicMock:
    """LLM provider double with vision support and a canned JSON answer."""
    llm = MagicMock(spec=ILLMProvider)
    answer = '{"summary": "A cat on a sofa.", "tags": ["cat", "sofa"], "category": "pets"}'
    llm.complete = AsyncMock(return_value=answer)
    llm.vision_extract = AsyncMock(return_value=answer)
    llm.supports_vision.return_value = True
    llm.is_available.return_value = True
    llm.get_provider_name.return_value = "mock-llm"
    return llm
