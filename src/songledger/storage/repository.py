"""Abstract key-value store interface and an in-memory implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager


class KeyValueWriter(ABC):
    @abstractmethod
    def write(self, key: str, text: str) -> None: ...


class BufferedWriter(KeyValueWriter):
    """Collects writes until the owning session flushes them."""

    def __init__(self) -> None:
        self.pending: dict[str, str] = {}

    def write(self, key: str, text: str) -> None:
        self.pending[key] = text


class KeyValueStore(ABC):
    """Durable text store addressed by fixed string keys.

    Writes go through :meth:`session`, which yields a writer and flushes the
    buffered values when the ``with`` block exits without an exception.
    """

    @abstractmethod
    def read(self, key: str) -> str | None: ...

    @abstractmethod
    def session(self) -> AbstractContextManager[KeyValueWriter]: ...


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory store for development/testing."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})
        self.flushes = 0

    def read(self, key: str) -> str | None:
        return self._store.get(key)

    @contextmanager
    def session(self) -> Iterator[KeyValueWriter]:
        writer = BufferedWriter()
        yield writer
        self._store.update(writer.pending)
        self.flushes += 1
