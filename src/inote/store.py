"""Note Store: durable ownership of the note collection.

Every read and write of the collection goes through :class:`NoteStore`.
The whole collection lives in one storage slot and each mutation is a
read-modify-write of that slot. Mutations on one store instance are
serialized by an :class:`asyncio.Lock`; independent instances sharing a
slot are not coordinated and can lose updates.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from .models import (
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    Note,
    PayloadError,
    clamp_font_size,
    decode_collection,
    encode_collection,
    utcnow,
)
from .storage import KeyValueStorage, StorageReadError, StorageWriteError
from .utils import generate_note_id
from .vocab import ALL_CATEGORY

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "notes"


class ValidationError(ValueError):
    """Raised when a note fails a precondition for saving."""


def filter_and_sort(
    notes: Iterable[Note],
    *,
    category: str = ALL_CATEGORY,
    search_text: str = "",
) -> list[Note]:
    """Project a collection into display order.

    Notes are sorted by ``last_edited`` descending (stable for ties), then
    kept when they match ``category`` (``"all"`` matches everything) and
    contain ``search_text`` case-insensitively in the title or content.

    Args:
        notes: Collection in storage order.
        category: Category id or ``"all"``.
        search_text: Substring to look for; empty keeps every note.

    Returns:
        A new list; the input is not modified.

    """
    needle = search_text.lower()
    ordered = sorted(notes, key=lambda note: note.last_edited, reverse=True)
    return [
        note
        for note in ordered
        if (category == ALL_CATEGORY or note.category == category)
        and (
            not needle
            or needle in note.title.lower()
            or needle in note.content.lower()
        )
    ]


def category_counts(notes: Iterable[Note], categories: Iterable[str]) -> dict[str, int]:
    """Count the notes each category filter would show."""
    collection = list(notes)
    return {
        category: sum(
            1
            for note in collection
            if category == ALL_CATEGORY or note.category == category
        )
        for category in categories
    }


class NoteStore:
    """Persistence and query layer for notes.

    Args:
        storage: Key-value storage service holding the collection.
        key: Name of the slot holding the collection.
        clock: Returns the current time; defaults to aware UTC ``now``.
        font_size_bounds: Inclusive range ``font_size`` is clamped into.

    """

    filter_and_sort = staticmethod(filter_and_sort)
    category_counts = staticmethod(category_counts)

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] | None = None,
        font_size_bounds: tuple[float, float] = (MIN_FONT_SIZE, MAX_FONT_SIZE),
    ) -> None:
        """Bind the store to its storage slot."""
        self.storage = storage
        self.key = key
        self._clock = clock or utcnow
        self._font_size_bounds = font_size_bounds
        self._lock = asyncio.Lock()

    async def load_all(self) -> list[Note]:
        """Read the entire collection in storage order.

        Returns:
            The persisted notes, or an empty list if nothing was saved yet.

        Raises:
            StorageReadError: If the medium fails or the payload is invalid.

        """
        try:
            text = await self.storage.get(self.key)
        except OSError as exc:
            msg = f"Failed to read storage slot {self.key!r}: {exc}"
            raise StorageReadError(self.key, msg) from exc
        if text is None:
            logger.debug("Storage slot %s is empty", self.key)
            return []
        try:
            notes = decode_collection(text)
        except PayloadError as exc:
            raise StorageReadError(self.key, str(exc)) from exc
        logger.debug("Loaded %d notes from %s", len(notes), self.key)
        return notes

    async def load_all_or_empty(self) -> list[Note]:
        """Like :meth:`load_all`, degrading read failures to no notes."""
        try:
            return await self.load_all()
        except StorageReadError as exc:
            logger.warning("Could not load notes, continuing with none: %s", exc)
            return []

    async def get(self, note_id: str) -> Note | None:
        """Return the note with ``note_id`` or ``None``."""
        notes = await self.load_all()
        return next((note for note in notes if note.id == note_id), None)

    async def save(self, note: Note) -> Note:
        """Insert or replace ``note`` and persist the collection.

        A note carrying the ``"new"`` sentinel receives a fresh id and
        creation time. A known id is replaced in place, keeping the stored
        creation time. An unknown id is inserted as if new but keeps the
        caller's id.

        Returns:
            The note as persisted.

        Raises:
            ValidationError: If the title is blank. Nothing is written.
            StorageReadError: If the current collection cannot be read.
            StorageWriteError: If the collection cannot be written.

        """
        if not note.title.strip():
            msg = "Please enter a title for your note"
            raise ValidationError(msg)

        async with self._lock:
            notes = await self.load_all()
            now = self._clock()
            changes = {
                "last_edited": now,
                "font_size": clamp_font_size(note.font_size, self._font_size_bounds),
                "tags": list(dict.fromkeys(note.tags)),
                "images": list(note.images),
            }

            if note.is_new:
                changes["id"] = generate_note_id({n.id for n in notes})
                changes["created_at"] = now
                saved = note.model_copy(update=changes)
                notes.insert(0, saved)
                logger.info("Created note %s", saved.id)
            else:
                index = next(
                    (i for i, existing in enumerate(notes) if existing.id == note.id),
                    None,
                )
                if index is None:
                    changes["created_at"] = min(note.created_at, now)
                    saved = note.model_copy(update=changes)
                    notes.insert(0, saved)
                    logger.info("Inserted note %s with unknown id", saved.id)
                else:
                    changes["created_at"] = notes[index].created_at
                    saved = note.model_copy(update=changes)
                    notes[index] = saved
                    logger.info("Updated note %s", saved.id)

            await self._write(notes)
        return saved

    async def delete(self, note_id: str) -> bool:
        """Remove the note with ``note_id``; absent ids are a no-op.

        Returns:
            ``True`` if a note was removed, ``False`` if none had ``note_id``.

        Raises:
            StorageWriteError: If the reduced collection cannot be written.

        """
        async with self._lock:
            notes = await self.load_all()
            remaining = [note for note in notes if note.id != note_id]
            if len(remaining) == len(notes):
                logger.debug("Delete of unknown note %s ignored", note_id)
                return False
            await self._write(remaining)
            logger.info("Deleted note %s", note_id)
            return True

    async def set_favorite(
        self,
        note_id: str,
        is_favorite: bool,  # noqa: FBT001
    ) -> bool | None:
        """Set the favorite flag without touching ``last_edited``.

        Returns:
            The stored flag, or ``None`` if no note has ``note_id``.

        """
        return await self._update_favorite(note_id, lambda _current: is_favorite)

    async def toggle_favorite(self, note_id: str) -> bool | None:
        """Flip the favorite flag.

        Returns:
            The new flag, or ``None`` if no note has ``note_id``.

        """
        return await self._update_favorite(note_id, lambda current: not current)

    async def _update_favorite(
        self,
        note_id: str,
        decide: Callable[[bool], bool],
    ) -> bool | None:
        async with self._lock:
            notes = await self.load_all()
            result: bool | None = None
            updated: list[Note] = []
            for note in notes:
                if note.id == note_id:
                    result = decide(note.is_favorite)
                    note = note.model_copy(update={"is_favorite": result})  # noqa: PLW2901
                updated.append(note)
            if result is None:
                logger.debug("Favorite change for unknown note %s ignored", note_id)
                return None
            await self._write(updated)
            logger.info("Set favorite=%s on note %s", result, note_id)
            return result

    async def _write(self, notes: list[Note]) -> None:
        try:
            await self.storage.set(self.key, encode_collection(notes))
        except OSError as exc:
            logger.exception(
                "Failed to persist %d notes",
                len(notes),
                extra={"storage_key": self.key, "note_count": len(notes)},
            )
            msg = f"Failed to write storage slot {self.key!r}: {exc}"
            raise StorageWriteError(self.key, msg) from exc
