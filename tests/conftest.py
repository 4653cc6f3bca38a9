"""Test configuration for inote."""

import asyncio
import logging
import uuid
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import fsspec
import pytest

from inote.logging_utils import JSONFormatter
from inote.storage import FsspecStorage, StorageReadError, StorageWriteError
from inote.store import NoteStore

T0 = datetime(2024, 1, 1, tzinfo=UTC)


class FakeClock:
    """Returns strictly increasing timestamps, one second apart."""

    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


class DictStorage:
    """In-process key-value storage; optionally yields to the event loop."""

    def __init__(self, *, yield_control: bool = False) -> None:
        self.slots: dict[str, str] = {}
        self.writes = 0
        self.yield_control = yield_control

    async def get(self, key: str) -> str | None:
        if self.yield_control:
            await asyncio.sleep(0)
        return self.slots.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.yield_control:
            await asyncio.sleep(0)
        self.slots[key] = value
        self.writes += 1


class FailingStorage(DictStorage):
    """Storage whose reads and/or writes fail on demand."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageReadError(key, "medium unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError(key, "device full")
        await super().set(key, value)


@pytest.fixture(autouse=True)
def reset_json_logging() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JSONFormatter):
            root.removeHandler(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def dict_storage() -> DictStorage:
    return DictStorage()


@pytest.fixture
def yielding_storage() -> DictStorage:
    return DictStorage(yield_control=True)


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def memory_root() -> Iterator[str]:
    root = f"memory://inote-test-{uuid.uuid4().hex}"
    yield root
    fs = fsspec.filesystem("memory")
    if fs.exists(root):
        fs.rm(root, recursive=True)


@pytest.fixture
def memory_storage(memory_root: str) -> FsspecStorage:
    return FsspecStorage(memory_root)


@pytest.fixture
def store(memory_storage: FsspecStorage, clock: FakeClock) -> NoteStore:
    return NoteStore(memory_storage, clock=clock)
