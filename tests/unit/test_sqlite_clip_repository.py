"""Unit tests for SQLiteClipRepository."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import pytest

from clipvault.models.clip import Clip, ClipFilter, FileType
from clipvault.providers.clips.sqlite_clip_repository import SQLiteClipRepository
from clipvault.utils.errors import (
    DuplicateKeyError,
    NotFoundError,
    StorageReadError,
    ValidationError,
)


def _clip(clip_id: str, **overrides) -> Clip:
    fields = {
        "id": clip_id,
        "filename": f"{clip_id}.txt",
        "file_type": FileType.TEXT,
        "file_size": 10,
        "storage_path": f"{clip_id}-{clip_id}.txt",
        "thumbnail_url": None,
        "ai_summary": f"Summary of {clip_id}",
        "ai_tags": ["alpha", "beta"],
        "ai_category": "misc",
        "extracted_text": "body",
    }
    fields.update(overrides)
    return Clip(**fields)


def _image(clip_id: str, **overrides) -> Clip:
    overrides.setdefault("file_type", FileType.IMAGE)
    overrides.setdefault("filename", f"{clip_id}.png")
    overrides.setdefault("storage_path", f"{clip_id}-{clip_id}.png")
    overrides.setdefault("thumbnail_url", f"/uploads/{clip_id}-{clip_id}.png")
    return _clip(clip_id, **overrides)


class TestInsert:
    @pytest.mark.asyncio
    async def test_insert_assigns_created_at(self, repository: SQLiteClipRepository) -> None:
        stored = await repository.insert(_clip("a"))
        assert stored.created_at == datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_insert_then_get(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("a", ai_tags=["z", "a", "m"]))
        fetched = await repository.get("a")
        assert fetched is not None
        assert fetched.ai_tags == ["z", "a", "m"]
        assert fetched.ai_category == "misc"
        assert fetched.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_id(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("a"))
        with pytest.raises(DuplicateKeyError):
            await repository.insert(_clip("a", filename="other.txt", storage_path="a-other.txt"))
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_blank_summary_rejected(self, repository: SQLiteClipRepository) -> None:
        with pytest.raises(ValidationError):
            await repository.insert(_clip("a", ai_summary="  "))
        assert await repository.count() == 0

    @pytest.mark.asyncio
    async def test_text_with_thumbnail_rejected(self, repository: SQLiteClipRepository) -> None:
        with pytest.raises(ValidationError):
            await repository.insert(_clip("a", thumbnail_url="/uploads/a-a.txt"))

    @pytest.mark.asyncio
    async def test_image_without_thumbnail_rejected(self, repository: SQLiteClipRepository) -> None:
        with pytest.raises(ValidationError):
            await repository.insert(_image("a", thumbnail_url=None))


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_row(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("a"))
        await repository.delete("a")
        assert await repository.get("a") is None
        assert await repository.get_storage_path("a") is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, repository: SQLiteClipRepository) -> None:
        with pytest.raises(NotFoundError):
            await repository.delete("nope")


class TestList:
    @pytest.mark.asyncio
    async def test_newest_first(self, repository: SQLiteClipRepository) -> None:
        for clip_id in ("first", "second", "third"):
            await repository.insert(_clip(clip_id))
        clips = await repository.list_clips()
        assert [c.id for c in clips] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_latest_insert_first(self, tmp_path: Path) -> None:
        fixed = datetime(2024, 1, 1, tzinfo=timezone.utc)
        repo = SQLiteClipRepository(db_path=tmp_path / "tie.db", clock=lambda: fixed)
        await repo.initialize()
        for clip_id in ("a", "b", "c"):
            await repo.insert(_clip(clip_id))
        assert [c.id for c in await repo.list_clips()] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_type_and_query_filter(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("t1", filename="foo-notes.txt", storage_path="t1-foo-notes.txt"))
        await repository.insert(
            _clip("p1", file_type=FileType.PDF, filename="FOO-report.pdf", storage_path="p1-FOO-report.pdf")
        )
        await repository.insert(
            _clip("p2", file_type=FileType.PDF, filename="report.pdf", storage_path="p2-report.pdf")
        )
        await repository.insert(
            _clip("p3", file_type=FileType.PDF, filename="x.pdf", storage_path="p3-x.pdf", ai_tags=["food"])
        )
        await repository.insert(
            _clip("p4", file_type=FileType.PDF, filename="y.pdf", storage_path="p4-y.pdf", ai_category="Foosball")
        )
        await repository.insert(
            _clip("p5", file_type=FileType.PDF, filename="z.pdf", storage_path="p5-z.pdf", ai_summary="All about foo.")
        )

        clips = await repository.list_clips(ClipFilter(query="foo", file_type=FileType.PDF))
        assert {c.id for c in clips} == {"p1", "p3", "p4", "p5"}

    @pytest.mark.asyncio
    async def test_query_is_case_insensitive_for_non_ascii(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("a", ai_summary="Trip to ZÜRICH"))
        clips = await repository.list_clips(ClipFilter(query="zürich"))
        assert [c.id for c in clips] == ["a"]

    @pytest.mark.asyncio
    async def test_query_does_not_match_extracted_text(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("a", extracted_text="needle in here"))
        assert await repository.list_clips(ClipFilter(query="needle")) == []

    @pytest.mark.asyncio
    async def test_type_only(self, repository: SQLiteClipRepository) -> None:
        await repository.insert(_clip("t"))
        await repository.insert(_image("i"))
        clips = await repository.list_clips(ClipFilter(file_type=FileType.IMAGE))
        assert [c.id for c in clips] == ["i"]
        assert clips[0].thumbnail_url == "/uploads/i-i.png"

    @pytest.mark.asyncio
    async def test_empty_store(self, repository: SQLiteClipRepository) -> None:
        assert await repository.list_clips() == []
        assert await repository.count() == 0


class TestCorruptRows:
    @pytest.mark.asyncio
    async def test_bad_tag_column_raises_read_error(
        self, repository: SQLiteClipRepository, tmp_path: Path
    ) -> None:
        await repository.insert(_clip("a"))
        async with aiosqlite.connect(str(tmp_path / "clips.db")) as db:
            await db.execute("UPDATE clips SET ai_tags = 'not json' WHERE id = 'a';")
            await db.commit()
        with pytest.raises(StorageReadError):
            await repository.list_clips()
