"""
Durable document stores for tracker state.

A store holds one JSON document (an object or an array) and offers full
overwrite semantics: the last writer's document wins. Two implementations
are selected by ``Config.STORAGE_BACKEND``:

    - "memory": process-local, for read-only or ephemeral filesystems and tests
    - "file":   a JSON file on local disk, for development persistence

Every failure surfaces as ``StorageError``; callers decide whether it is
fatal. The tracker treats all of them as soft failures.

Example:

    from src.storage.backends import create_store

    store = create_store("file", Path("data/silver-daily-extremes.json"))
    store.write({"date": "2026-01-15", "high": 101.5})
    print(store.read())
"""

import contextlib
import copy
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class StorageError(RuntimeError):
    """A durable read or write could not be completed."""


class DocumentStore(ABC):
    """One JSON document with read / overwrite access."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human readable location for log messages."""
        ...

    @abstractmethod
    def read(self) -> Any | None:
        """Return the stored document, or None when nothing has been written.

        Raises:
            StorageError: If the document exists but cannot be read or parsed.
        """
        ...

    @abstractmethod
    def write(self, document: Any) -> None:
        """Replace the stored document.

        Raises:
            StorageError: If the document cannot be serialised or persisted.
        """
        ...


class MemoryDocumentStore(DocumentStore):
    """Process-local store. Documents are deep-copied in and out."""

    def __init__(self, name: str = "memory") -> None:
        self._name = name
        self._document: Any | None = None
        self._lock = threading.Lock()

    @property
    def location(self) -> str:
        return f"memory://{self._name}"

    def read(self) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._document)

    def write(self, document: Any) -> None:
        try:
            # Same serialisability contract as the file store
            json.dumps(document)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Document for {self.location} is not JSON serialisable: {e}") from e
        with self._lock:
            self._document = copy.deepcopy(document)


class JsonFileDocumentStore(DocumentStore):
    """JSON file on disk, written atomically via a temp file and rename."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def read(self) -> Any | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Malformed JSON in {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

    def write(self, document: Any) -> None:
        try:
            payload = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Document for {self.path} is not JSON serialisable: {e}") from e

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageError(f"Cannot write {self.path}: {e}") from e


def create_store(backend: str, path: Path) -> DocumentStore:
    """Build the document store for a backend name.

    Args:
        backend: "file" or "memory".
        path: JSON file location (also used to name memory stores).

    Raises:
        ValueError: If the backend name is unknown.
    """
    if backend == "file":
        return JsonFileDocumentStore(path)
    if backend == "memory":
        return MemoryDocumentStore(Path(path).stem)
    raise ValueError(f"Unknown storage backend: {backend}")
