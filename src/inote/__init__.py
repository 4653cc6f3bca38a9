"""inote: local note store."""

from .models import (
    SCHEMA_VERSION,
    Note,
    PayloadError,
    decode_collection,
    encode_collection,
)
from .session import EditSession
from .storage import (
    FsspecStorage,
    KeyValueStorage,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from .store import (
    NoteStore,
    ValidationError,
    category_counts,
    filter_and_sort,
)
from .utils import NEW_NOTE_ID, generate_note_id

__all__ = [
    "NEW_NOTE_ID",
    "SCHEMA_VERSION",
    "EditSession",
    "FsspecStorage",
    "KeyValueStorage",
    "Note",
    "NoteStore",
    "PayloadError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "ValidationError",
    "category_counts",
    "decode_collection",
    "encode_collection",
    "filter_and_sort",
    "generate_note_id",
]
