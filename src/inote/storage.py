"""Key-value storage service implemented via fsspec."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Protocol

from .utils import fs_join, get_fs_and_path, validate_storage_key

if TYPE_CHECKING:
    import fsspec

logger = logging.getLogger(__name__)

SLOT_SUFFIX = ".json"


class StorageError(Exception):
    """Base class for failures of the storage medium."""

    def __init__(self, key: str, message: str) -> None:
        """Store the slot name alongside the message."""
        super().__init__(message)
        self.key = key


class StorageReadError(StorageError):
    """Raised when a slot cannot be read or its payload cannot be parsed."""


class StorageWriteError(StorageError):
    """Raised when a slot cannot be written."""


class KeyValueStorage(Protocol):
    """Asynchronous text slots addressed by key."""

    async def get(self, key: str) -> str | None:
        """Return the slot text, or ``None`` when the slot does not exist."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Replace the slot text."""
        ...


class FsspecStorage:
    """Stores each slot as ``<root>/<key>.json`` on an fsspec filesystem.

    ``root`` may be a local path or any fsspec URL, e.g. ``memory://notes``
    for tests. Blocking filesystem calls run in a worker thread.
    """

    def __init__(
        self,
        root: str,
        fs: fsspec.AbstractFileSystem | None = None,
    ) -> None:
        """Bind the storage to ``root``."""
        self.root = root
        self.fs, self.path = get_fs_and_path(root, fs)

    def slot_path(self, key: str) -> str:
        """Return the filesystem path backing ``key``."""
        safe_key = validate_storage_key(key)
        return fs_join(self.path, f"{safe_key}{SLOT_SUFFIX}")

    async def get(self, key: str) -> str | None:
        """Read a slot.

        Raises:
            StorageReadError: If the medium fails or the bytes are not UTF-8.

        """
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        """Write a slot via a temporary file moved over the target.

        Raises:
            StorageWriteError: If any filesystem step fails.

        """
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> str | None:
        path = self.slot_path(key)
        try:
            if not self.fs.exists(path):
                return None
            with self.fs.open(path, "rb") as handle:
                raw = handle.read()
            return raw.decode("utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read storage slot {key!r}: {exc}"
            raise StorageReadError(key, msg) from exc

    def _write(self, key: str, value: str) -> None:
        path = self.slot_path(key)
        tmp_path = f"{path}.{uuid.uuid4().hex}.tmp"
        try:
            self.fs.makedirs(self.path, exist_ok=True)
            with self.fs.open(tmp_path, "wb") as handle:
                handle.write(value.encode("utf-8"))
            self.fs.mv(tmp_path, path)
        except OSError as exc:
            logger.exception(
                "Failed to write storage slot %s",
                key,
                extra={"storage_key": key, "path": path},
            )
            self._discard(tmp_path)
            msg = f"Failed to write storage slot {key!r}: {exc}"
            raise StorageWriteError(key, msg) from exc
        logger.debug("Wrote %d bytes to storage slot %s", len(value), key)

    def _discard(self, tmp_path: str) -> None:
        try:
            if self.fs.exists(tmp_path):
                self.fs.rm(tmp_path)
        except OSError as exc:
            logger.warning("Could not remove temporary file %s: %s", tmp_path, exc)
