"""In-memory edit session with undo/redo for a single note."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .models import Note

if TYPE_CHECKING:
    from .store import NoteStore

logger = logging.getLogger(__name__)

FORMAT_SNIPPETS: dict[str, str] = {
    "bold": "**bold text**",
    "italic": "_italic text_",
    "underline": "__underlined text__",
    "strikethrough": "~~strikethrough text~~",
    "list": "\n- List item",
    "checklist": "\n[ ] Checklist item",
}


class EditSession:
    """Tracks edits to one note until it is committed or abandoned.

    Undo and redo stacks hold whole-note snapshots and are never persisted.
    Snapshots are deep copies, so mutating ``note.tags`` or ``note.images``
    in place cannot rewrite history.
    """

    def __init__(self, note: Note) -> None:
        """Start editing ``note``."""
        self.note = note
        self._undo: list[Note] = []
        self._redo: list[Note] = []

    @classmethod
    def new(cls, **fields: Any) -> EditSession:  # noqa: ANN401
        """Start a session for a note that has not been saved yet."""
        return cls(Note.draft(**fields))

    @property
    def can_undo(self) -> bool:
        """Whether there is an edit to step back from."""
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        """Whether an undone edit can be reapplied."""
        return bool(self._redo)

    def update(self, **changes: Any) -> Note:  # noqa: ANN401
        """Apply ``changes`` as one undoable step."""
        for name in ("tags", "images"):
            if name in changes:
                changes[name] = list(changes[name])
        self._undo.append(self.note.model_copy(deep=True))
        self._redo.clear()
        self.note = self.note.model_copy(update=changes, deep=True)
        return self.note

    def undo(self) -> bool:
        """Restore the snapshot taken before the last edit.

        Returns:
            ``False`` if there was nothing to undo.

        """
        if not self._undo:
            return False
        self._redo.append(self.note.model_copy(deep=True))
        self.note = self._undo.pop()
        return True

    def redo(self) -> bool:
        """Reapply the most recently undone edit; ``False`` if none."""
        if not self._redo:
            return False
        self._undo.append(self.note.model_copy(deep=True))
        self.note = self._redo.pop()
        return True

    def add_image(self, uri: str) -> Note:
        """Append an image URI."""
        return self.update(images=[*self.note.images, uri])

    def toggle_tag(self, tag_id: str) -> Note:
        """Add ``tag_id`` if missing, otherwise remove it."""
        if tag_id in self.note.tags:
            tags = [tag for tag in self.note.tags if tag != tag_id]
        else:
            tags = [*self.note.tags, tag_id]
        return self.update(tags=tags)

    def toggle_favorite(self) -> Note:
        """Flip the favorite flag as an undoable edit."""
        return self.update(is_favorite=not self.note.is_favorite)

    def apply_format(self, kind: str) -> Note:
        """Append the placeholder snippet for a formatting ``kind``.

        Raises:
            ValueError: If ``kind`` is not one of :data:`FORMAT_SNIPPETS`.

        """
        try:
            snippet = FORMAT_SNIPPETS[kind]
        except KeyError:
            msg = f"Unknown format {kind!r}; expected one of {', '.join(FORMAT_SNIPPETS)}"
            raise ValueError(msg) from None
        return self.update(content=self.note.content + snippet)

    async def commit(self, store: NoteStore) -> Note:
        """Save the current note and reset the history.

        On failure the edit stays in memory untouched so it can be retried.

        Raises:
            ValidationError: If the title is blank.
            StorageReadError: If the collection cannot be read.
            StorageWriteError: If the collection cannot be written.

        """
        saved = await store.save(self.note)
        logger.debug("Committed edit session for note %s", saved.id)
        self.note = saved
        self._undo.clear()
        self._redo.clear()
        return saved
