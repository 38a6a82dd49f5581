"""Abstract base class for blob storage providers.

Defines the contract for persisting raw file bytes under a key.  The
shipped implementation writes to the local filesystem
(LocalBlobStore, clipvault/providers/blob/); an object-storage bucket can
implement the same contract without touching the clip service.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: LocalBlobStore (clipvault/providers/blob/)
class IBlobStore(ABC):
    """Contract for key-addressed byte storage.

    All I/O operations are async to support network-backed stores.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create the storage root / bucket if it doesn't exist.  Called at startup."""

    @abstractmethod
    async def put(self, key: str, data: bytes, overwrite: bool = True) -> str:
        """Write *data* under *key*.

        With ``overwrite=False`` an existing blob under *key* is left
        untouched and ``DuplicateKeyError`` is raised instead.

        Returns
        -------
        str
            The public address of the stored blob (see :meth:`public_address`).

        Raises
        ------
        clipvault.utils.errors.StorageWriteError
            On I/O failure, quota exhaustion, or a key that would escape
            the storage root.
        clipvault.utils.errors.DuplicateKeyError
            *key* is already taken and *overwrite* is false.
        """

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Read the blob stored under *key*.

        Raises
        ------
        clipvault.utils.errors.StorageReadError
            If the blob is missing or unreadable.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if a blob is stored under *key*."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the blob stored under *key*.

        Deleting a key that is already absent is a no-op, never an error.
        """

    @abstractmethod
    def public_address(self, key: str) -> str:
        """Map *key* to the URL/path the blob is served from.

        Pure and deterministic; performs no I/O.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
