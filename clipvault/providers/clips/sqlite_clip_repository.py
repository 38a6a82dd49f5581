"""SQLite-backed clip metadata repository.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IClipRepository).
# Pattern: Adapter pattern, wraps SQLite behind the IClipRepository ABC
#          so the metadata backend can be swapped without touching the
#          clip service.
#
# Database: ``data/clips.db``, one row per clip.
#
#   - ``id`` is the primary key; a reused id surfaces as DuplicateKeyError.
#     Under concurrent ingests this constraint is the only serialization
#     point.
#   - ``ai_tags`` is a JSON array in a TEXT column (see tag_codec.py).
#   - ``created_at`` is assigned here at insert time (UTC, microsecond
#     ISO-8601, so lexical order is chronological).  Ties fall back to the
#     implicit ``rowid``, which grows with insertion order.
#
# Uses ``aiosqlite`` for async I/O and ``PRAGMA journal_mode=WAL`` for
# concurrent read safety.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from clipvault.interfaces.clip_repository import IClipRepository
from clipvault.models.clip import Clip, ClipFilter, FileType
from clipvault.providers.clips.tag_codec import decode_tags, encode_tags
from clipvault.utils.errors import (
    DuplicateKeyError,
    NotFoundError,
    StorageWriteError,
    ValidationError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/clips.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_CLIPS_TABLE = """\
CREATE TABLE IF NOT EXISTS clips (
    id              TEXT    PRIMARY KEY,
    filename        TEXT    NOT NULL,
    file_type       TEXT    NOT NULL,
    file_size       INTEGER NOT NULL,
    storage_path    TEXT    NOT NULL,
    thumbnail_url   TEXT,
    ai_summary      TEXT    NOT NULL,
    ai_tags         TEXT    NOT NULL,
    ai_category     TEXT,
    extracted_text  TEXT,
    created_at      TEXT    NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_clips_file_type ON clips(file_type);",
    "CREATE INDEX IF NOT EXISTS idx_clips_created ON clips(created_at);",
]

# ── DML ───────────────────────────────────────────────────────────────

_COLUMNS = (
    "id, filename, file_type, file_size, storage_path, thumbnail_url, "
    "ai_summary, ai_tags, ai_category, extracted_text, created_at"
)

_INSERT_CLIP = f"""\
INSERT INTO clips ({_COLUMNS})
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_CLIP = f"SELECT {_COLUMNS} FROM clips WHERE id = ?;"

_SELECT_STORAGE_PATH = "SELECT storage_path FROM clips WHERE id = ?;"

_DELETE_CLIP = "DELETE FROM clips WHERE id = ?;"

# Searchable columns for the free-text query.  ai_tags is matched in its
# serialized form.
_QUERY_COLUMNS = ("filename", "ai_summary", "ai_tags", "ai_category")

# SQLite's LIKE / lower() only fold ASCII, so the substring test is a
# registered Python function.
_CONTAINS_FN = "clip_contains"


def _contains_casefold(haystack: str | None, needle: str | None) -> int:
    if haystack is None or needle is None:
        return 0
    return int(needle.casefold() in haystack.casefold())


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class SQLiteClipRepository(IClipRepository):
    """SQLite-backed clip metadata persistence.

    Parameters
    ----------
    db_path:
        Location of the SQLite file; parent directories are created on
        :meth:`initialize`.
    clock:
        Source of ``created_at`` timestamps.  Defaults to UTC now.
    """

    def __init__(
        self,
        db_path: str | Path = _DEFAULT_DB_PATH,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._db_path = Path(db_path)
        self._clock = clock or _utc_now

    async def initialize(self) -> None:
        """Create the clips table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_CLIPS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("clip_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_clips"

    # ── Writes ─────────────────────────────────────────────────────────

    async def insert(self, clip: Clip) -> Clip:
        """Insert one clip row and return it with ``created_at`` assigned."""
        self._validate(clip)
        created_at = self._clock().astimezone(timezone.utc)
        stored = clip.model_copy(update={"created_at": created_at})

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_INSERT_CLIP, (
                    stored.id,
                    stored.filename,
                    stored.file_type.value,
                    stored.file_size,
                    stored.storage_path,
                    stored.thumbnail_url,
                    stored.ai_summary,
                    encode_tags(stored.ai_tags),
                    stored.ai_category,
                    stored.extracted_text,
                    created_at.isoformat(timespec="microseconds"),
                ))
                await db.commit()
        except aiosqlite.IntegrityError as exc:
            if "UNIQUE" in str(exc) and "clips.id" in str(exc):
                raise DuplicateKeyError(
                    message=f"Clip id already exists: {clip.id}",
                    provider_name=self.get_provider_name(),
                ) from exc
            raise ValidationError(
                message=f"Clip row rejected: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except aiosqlite.Error as exc:
            raise StorageWriteError(
                message=f"Failed to insert clip {clip.id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "clip_row_inserted",
            clip_id=stored.id,
            file_type=stored.file_type.value,
            file_size=stored.file_size,
        )
        return stored

    async def delete(self, clip_id: str) -> None:
        """Delete a clip row; NotFoundError if it doesn't exist."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_DELETE_CLIP, (clip_id,))
            await db.commit()
            deleted = cursor.rowcount

        if deleted == 0:
            raise NotFoundError(
                message=f"Clip not found: {clip_id}",
                provider_name=self.get_provider_name(),
            )
        logger.info("clip_row_deleted", clip_id=clip_id)

    # ── Reads ──────────────────────────────────────────────────────────

    async def list_clips(self, clip_filter: ClipFilter | None = None) -> list[Clip]:
        """List clips matching the filter, newest first."""
        clip_filter = clip_filter or ClipFilter()
        conditions: list[str] = []
        params: list[Any] = []

        if clip_filter.file_type is not None:
            conditions.append("file_type = ?")
            params.append(clip_filter.file_type.value)
        if clip_filter.query is not None:
            conditions.append(
                "(" + " OR ".join(f"{_CONTAINS_FN}({col}, ?)" for col in _QUERY_COLUMNS) + ")"
            )
            params.extend([clip_filter.query] * len(_QUERY_COLUMNS))

        sql = f"SELECT {_COLUMNS} FROM clips"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC, rowid DESC;"

        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.create_function(_CONTAINS_FN, 2, _contains_casefold, deterministic=True)
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()

        return [self._row_to_clip(dict(r)) for r in rows]

    async def get(self, clip_id: str) -> Clip | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_CLIP, (clip_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_clip(dict(row))

    async def get_storage_path(self, clip_id: str) -> str | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_SELECT_STORAGE_PATH, (clip_id,))
            row = await cursor.fetchone()
        return row[0] if row else None

    async def count(self) -> int:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM clips;")
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    # ── Helpers ────────────────────────────────────────────────────────

    def _validate(self, clip: Clip) -> None:
        """Reject clips whose required fields are blank or inconsistent."""
        for field_name in ("id", "filename", "storage_path", "ai_summary"):
            value = getattr(clip, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(
                    message=f"Clip field '{field_name}' is required",
                    provider_name=self.get_provider_name(),
                )
        is_image = clip.file_type == FileType.IMAGE
        if is_image != (clip.thumbnail_url is not None):
            raise ValidationError(
                message="thumbnail_url must be set for images and only for images",
                provider_name=self.get_provider_name(),
            )

    @staticmethod
    def _row_to_clip(row: dict[str, Any]) -> Clip:
        return Clip(
            id=row["id"],
            filename=row["filename"],
            file_type=FileType(row["file_type"]),
            file_size=row["file_size"],
            storage_path=row["storage_path"],
            thumbnail_url=row["thumbnail_url"],
            ai_summary=row["ai_summary"],
            ai_tags=decode_tags(row["ai_tags"]),
            ai_category=row["ai_category"],
            extracted_text=row["extracted_text"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
