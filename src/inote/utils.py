"""Utility functions for inote."""

from __future__ import annotations

import re
import secrets
import string
import time
from collections.abc import Collection

import fsspec

NEW_NOTE_ID = "new"
NOTE_ID_PREFIX = "note"
NOTE_ID_SUFFIX_LENGTH = 7
_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SAFE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
_SAFE_KEY_PATTERN = re.compile(r"^[a-zA-Z0-9@_-]+$")


def validate_id(identifier: str, name: str) -> str:
    """Validate that an identifier contains only safe characters.

    Args:
        identifier: The string to validate.
        name: The name of the field (for error messages).

    Returns:
        The validated identifier.

    Raises:
        ValueError: If the identifier contains invalid characters.

    """
    if not identifier or not _SAFE_ID_PATTERN.match(identifier):
        msg = (
            f"Invalid {name}: {identifier}. "
            "Must be alphanumeric, hyphens, or underscores."
        )
        raise ValueError(msg)
    return str(identifier)


def validate_storage_key(key: str) -> str:
    """Validate a storage slot name.

    Slot names double as file names, so they follow the identifier rules
    plus ``@`` (as in ``@inote-storage-dev``).

    Raises:
        ValueError: If the key is empty or contains unsafe characters.

    """
    if not key or not _SAFE_KEY_PATTERN.match(key):
        msg = (
            f"Invalid storage key: {key}. "
            "Must be alphanumeric, '@', hyphens, or underscores."
        )
        raise ValueError(msg)
    return str(key)


def _random_suffix(length: int = NOTE_ID_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def generate_note_id(existing: Collection[str] = ()) -> str:
    """Return a fresh note id of the form ``note-<ms>-<suffix>``.

    Args:
        existing: Ids already in use; the result never collides with them.

    Returns:
        A new identifier distinct from ``existing`` and from ``NEW_NOTE_ID``.

    """
    while True:
        candidate = (
            f"{NOTE_ID_PREFIX}-{time.time_ns() // 1_000_000}-{_random_suffix()}"
        )
        if candidate not in existing:
            return candidate


def get_fs_and_path(
    root: str,
    fs: fsspec.AbstractFileSystem | None = None,
) -> tuple[fsspec.AbstractFileSystem, str]:
    """Resolve ``root`` into an fsspec filesystem and a protocol-free path.

    Args:
        root: Local path or fsspec URL (``memory://``, ``file://``...).
        fs: Optional filesystem to use instead of inferring one from ``root``.

    Returns:
        Tuple of the filesystem and the path understood by it.

    """
    if fs is not None:
        return fs, fs._strip_protocol(root)  # noqa: SLF001
    return fsspec.core.url_to_fs(root)


def fs_join(base: str, *parts: str) -> str:
    """Join fsspec path segments with forward slashes."""
    cleaned = [base.rstrip("/")]
    cleaned.extend(part.strip("/") for part in parts if part)
    return "/".join(cleaned)
