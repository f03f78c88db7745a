"""Directory-backed key-value store: one ``<key>.json`` file per key."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from songledger.storage.repository import BufferedWriter, KeyValueStore, KeyValueWriter

logger = logging.getLogger("songledger.storage")

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore(KeyValueStore):
    """Stores each key in its own UTF-8 file under *directory*.

    Files are replaced atomically (write to a temp file, then ``os.replace``),
    so a reader never sees a half-written value.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @contextmanager
    def session(self) -> Iterator[KeyValueWriter]:
        writer = BufferedWriter()
        yield writer
        if not writer.pending:
            return
        self._directory.mkdir(parents=True, exist_ok=True)
        for key, text in writer.pending.items():
            self._replace(self._path(key), text)
        logger.debug("Flushed %d key(s) to %s", len(writer.pending), self._directory)

    def _replace(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
