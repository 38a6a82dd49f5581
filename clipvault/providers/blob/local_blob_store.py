"""Local-filesystem blob store.

Writes each blob to ``<root>/<key>`` and serves it from
``<public_prefix>/<key>`` (the FastAPI app mounts ``root`` as static files
under that prefix).  Blocking file I/O runs via ``asyncio.to_thread`` so
large uploads don't stall the event loop.
"""

from __future__ import annotations

import asyncio
import errno
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

import structlog

from clipvault.interfaces.blob_store import IBlobStore
from clipvault.utils.errors import DuplicateKeyError, StorageReadError, StorageWriteError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_ROOT = Path("data/uploads")
_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT}


class LocalBlobStore(IBlobStore):
    """Blob store backed by a directory on the local filesystem."""

    def __init__(
        self,
        root_dir: str | Path = _DEFAULT_ROOT,
        public_prefix: str = "/uploads",
    ) -> None:
        self._root = Path(root_dir)
        self._public_prefix = public_prefix.rstrip("/")

    @property
    def root_dir(self) -> Path:
        return self._root

    async def initialize(self) -> None:
        """Create the storage root if it doesn't exist."""
        await asyncio.to_thread(self._root.mkdir, parents=True, exist_ok=True)
        logger.info("blob_store_initialized", root=str(self._root))

    def get_provider_name(self) -> str:
        return "local_blob"

    # ── IBlobStore ─────────────────────────────────────────────────────

    async def put(self, key: str, data: bytes, overwrite: bool = True) -> str:
        path = self._resolve(key, StorageWriteError)
        try:
            await asyncio.to_thread(self._write, path, data, overwrite)
        except FileExistsError as exc:
            raise DuplicateKeyError(
                message=f"Blob already exists: {key}",
                provider_name=self.get_provider_name(),
            ) from exc
        except OSError as exc:
            reason = "storage quota exhausted" if exc.errno in _QUOTA_ERRNOS else str(exc)
            raise StorageWriteError(
                message=f"Failed to write blob {key}: {reason}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("blob_written", key=key, size=len(data))
        return self.public_address(key)

    async def get(self, key: str) -> bytes:
        path = self._resolve(key, StorageReadError)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise StorageReadError(
                message=f"Blob not found: {key}",
                provider_name=self.get_provider_name(),
            ) from exc
        except OSError as exc:
            raise StorageReadError(
                message=f"Failed to read blob {key}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def exists(self, key: str) -> bool:
        path = self._resolve(key, StorageReadError)
        return await asyncio.to_thread(path.is_file)

    async def delete(self, key: str) -> None:
        path = self._resolve(key, StorageWriteError)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageWriteError(
                message=f"Failed to delete blob {key}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("blob_deleted", key=key)

    def public_address(self, key: str) -> str:
        return f"{self._public_prefix}/{quote(key)}"

    # ── Helpers ────────────────────────────────────────────────────────

    def _resolve(self, key: str, error_cls: type[StorageWriteError] | type[StorageReadError]) -> Path:
        """Map a key to a path directly inside the root, rejecting anything else."""
        if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
            raise error_cls(
                message=f"Invalid blob key: {key!r}",
                provider_name=self.get_provider_name(),
            )
        return self._root / key

    @staticmethod
    def _write(path: Path, data: bytes, overwrite: bool) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Stage in a unique sibling file so readers never see a half-written
        # blob and concurrent writers never share a temp name.
        staged = tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".part", delete=False
        )
        tmp = Path(staged.name)
        try:
            with staged:
                staged.write(data)
            if overwrite:
                os.replace(tmp, path)
            else:
                # link() fails with FileExistsError instead of replacing.
                os.link(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)
