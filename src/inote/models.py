"""Note entity and the persisted collection envelope."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .utils import NEW_NOTE_ID

SCHEMA_VERSION = 1
LEGACY_SCHEMA_VERSION = 0
SUPPORTED_SCHEMA_VERSIONS = (LEGACY_SCHEMA_VERSION, SCHEMA_VERSION)

DEFAULT_BACKGROUND_COLOR = "#FFFFFF"
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_FONT_SIZE = 16
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 32


class PayloadError(ValueError):
    """Raised when a persisted payload does not match the expected schema."""


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Note(BaseModel):
    """A user-authored note.

    Field names are snake_case in Python and camelCase on disk
    (``backgroundColor``, ``lastEdited``...). Unknown persisted fields are
    kept so that they survive a load/save round trip.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    title: str = ""
    content: str = ""
    category: str | None = None
    priority: str | None = None
    tags: list[str] = Field(default_factory=list)
    background_color: str = DEFAULT_BACKGROUND_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    font_size: int | float = DEFAULT_FONT_SIZE
    images: list[str] = Field(default_factory=list)
    is_favorite: bool = False
    created_at: datetime
    last_edited: datetime

    @model_validator(mode="before")
    @classmethod
    def _default_timestamps(cls, data: Any) -> Any:  # noqa: ANN401
        if not isinstance(data, dict):
            return data
        data = dict(data)
        created = data.get("createdAt", data.get("created_at"))
        edited = data.get("lastEdited", data.get("last_edited"))
        if created is None and edited is None:
            created = edited = utcnow()
        elif created is None:
            created = edited
        elif edited is None:
            edited = created
        data.pop("created_at", None)
        data.pop("last_edited", None)
        data["createdAt"] = created
        data["lastEdited"] = edited
        return data

    @field_validator("created_at", "last_edited")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _edited_not_before_created(self) -> Self:
        if self.last_edited < self.created_at:
            self.last_edited = self.created_at
        return self

    @classmethod
    def draft(cls, now: datetime | None = None, **fields: Any) -> Note:  # noqa: ANN401
        """Build an unsaved note carrying the ``"new"`` sentinel id."""
        stamp = now or utcnow()
        return cls(id=NEW_NOTE_ID, created_at=stamp, last_edited=stamp, **fields)

    @property
    def is_new(self) -> bool:
        """Whether this note has not been persisted yet."""
        return self.id == NEW_NOTE_ID

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible, camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


def clamp_font_size(
    size: float,
    bounds: tuple[float, float] = (MIN_FONT_SIZE, MAX_FONT_SIZE),
) -> int | float:
    """Clamp ``size`` into the inclusive ``bounds`` range."""
    low, high = bounds
    return min(max(size, low), high)


def encode_collection(notes: list[Note]) -> str:
    """Serialize notes into the versioned envelope."""
    envelope = {
        "version": SCHEMA_VERSION,
        "notes": [note.to_payload() for note in notes],
    }
    return json.dumps(envelope, ensure_ascii=False)


def decode_collection(text: str) -> list[Note]:
    """Parse a persisted payload into notes.

    Accepts both the versioned envelope and the legacy bare JSON array,
    which is treated as version 0 and migrated in memory.

    Args:
        text: Raw payload read from storage.

    Returns:
        The notes in storage order.

    Raises:
        PayloadError: If the payload is not valid JSON, carries an
            unsupported version, or contains malformed notes.

    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Notes payload is not valid JSON: {exc}"
        raise PayloadError(msg) from exc

    if isinstance(data, list):
        version = LEGACY_SCHEMA_VERSION
        raw_notes = data
    elif isinstance(data, dict):
        version = data.get("version")
        raw_notes = data.get("notes", [])
    else:
        msg = f"Unexpected notes payload type: {type(data).__name__}"
        raise PayloadError(msg)

    if type(version) is not int or version not in SUPPORTED_SCHEMA_VERSIONS:
        msg = f"Unsupported notes schema version: {version!r}"
        raise PayloadError(msg)
    if not isinstance(raw_notes, list):
        msg = "Notes payload field 'notes' must be a list"
        raise PayloadError(msg)

    try:
        return [Note.model_validate(item) for item in raw_notes]
    except ValueError as exc:
        msg = f"Malformed note in payload: {exc}"
        raise PayloadError(msg) from exc
