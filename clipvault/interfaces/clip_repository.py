"""Abstract base class for clip metadata persistence providers.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# IClipRepository owns the clip metadata table.  The concrete
# implementation is SQLiteClipRepository
# (clipvault/providers/clips/sqlite_clip_repository.py); a managed
# database backend can implement the same contract.
#
# The repository never touches blob bytes.  Keeping rows consistent with
# the blob store is the clip service's job.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clipvault.models.clip import Clip, ClipFilter


class IClipRepository(ABC):
    """Contract for clip metadata persistence.  All storage operations are async."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── Writes ─────────────────────────────────────────────────────────

    @abstractmethod
    async def insert(self, clip: Clip) -> Clip:
        """Append one clip row.

        Parameters
        ----------
        clip:
            The clip to store.  Any ``created_at`` value on it is ignored;
            the repository assigns the timestamp.

        Returns
        -------
        Clip
            The stored clip with ``created_at`` populated.

        Raises
        ------
        clipvault.utils.errors.DuplicateKeyError
            If a clip with the same ``id`` already exists.
        clipvault.utils.errors.ValidationError
            If a required field is missing or malformed.
        """

    @abstractmethod
    async def delete(self, clip_id: str) -> None:
        """Remove the clip row.

        Raises
        ------
        clipvault.utils.errors.NotFoundError
            If no clip with *clip_id* exists.
        """

    # ── Reads ──────────────────────────────────────────────────────────

    @abstractmethod
    async def list_clips(self, clip_filter: ClipFilter | None = None) -> list[Clip]:
        """Return every clip matching *clip_filter*, newest first.

        ``file_type`` must match exactly; ``query`` is a case-insensitive
        substring of filename, summary, serialized tags, or category.
        Both conditions are ANDed.  Ties on ``created_at`` are broken by
        insertion order.
        """

    @abstractmethod
    async def get(self, clip_id: str) -> Clip | None:
        """Return a single clip by id, or ``None``."""

    @abstractmethod
    async def get_storage_path(self, clip_id: str) -> str | None:
        """Return the blob key of a clip, or ``None`` if the clip doesn't exist."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored clips."""
