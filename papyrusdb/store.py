"""Path-keyed entity store.

The reconciliation engine only needs five operations from its backing
store, captured by the ``EntityStore`` protocol. ``JsonFileStore`` is the
shipped implementation: one JSON document held in memory and written to
disk on ``save_now``.

Storage layout (one file):
    {
        "notes":      {"<id>": {...note or task...}},
        "categories": {"<name>": {...category...}}
    }

Keys are slash-joined paths into that document: ``"notes"``,
``"notes/<id>"``, ``"categories/<name>"``.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .config import Settings
from .errors import StoreError
from .logging_config import get_logger

logger = get_logger("store")

NOTES = "notes"
CATEGORIES = "categories"


@runtime_checkable
class EntityStore(Protocol):
    """Key-path store consumed by the reconciliation engine."""

    def has(self, key: str) -> bool:
        """Whether a value exists at ``key``."""
        ...

    def get(self, key: str) -> Any | None:
        """Value at ``key``, or None when absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` at ``key``, creating parent collections."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are ignored."""
        ...

    def save_now(self) -> None:
        """Durably flush every pending set/delete."""
        ...


def _split(key: str) -> list[str]:
    parts = key.split("/")
    if not all(parts):
        raise ValueError(f"Empty segment in store key: {key!r}")
    return parts


class JsonFileStore:
    """In-memory JSON document flushed atomically to a single file.

    Values handed out by ``get`` are deep copies: a caller has to ``set``
    a record back for a change to count.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._data: dict[str, Any] = self._load()
        for collection in (NOTES, CATEGORIES):
            if not self.has(collection):
                self.set(collection, {})

    def _load(self) -> dict[str, Any]:
        """Read the document from disk; an absent file is an empty store."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            # Refuse to start on top of a file we cannot read, it would be overwritten
            raise StoreError(f"Cannot read store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} does not hold a JSON object")
        return data

    def _parent(self, parts: list[str], create: bool = False) -> dict[str, Any] | None:
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                if not create:
                    return None
                child = {}
                node[part] = child
            node = child
        return node

    def has(self, key: str) -> bool:
        parts = _split(key)
        parent = self._parent(parts)
        return parent is not None and parts[-1] in parent

    def get(self, key: str) -> Any | None:
        parts = _split(key)
        parent = self._parent(parts)
        if parent is None or parts[-1] not in parent:
            return None
        return copy.deepcopy(parent[parts[-1]])

    def set(self, key: str, value: Any) -> None:
        parts = _split(key)
        parent = self._parent(parts, create=True)
        parent[parts[-1]] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        parts = _split(key)
        parent = self._parent(parts)
        if parent is not None:
            parent.pop(parts[-1], None)

    def save_now(self) -> None:
        """Write the document atomically (temp file + rename).

        Errors propagate: the in-memory state is not rolled back.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            logger.error(f"Error saving {self.path}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise


def open_store(settings: Settings) -> JsonFileStore:
    """Build the store selected by ``settings.db_type``."""
    if settings.db_type != "json":
        raise StoreError(f"Database type '{settings.db_type}' is not implemented")
    store = JsonFileStore(settings.db_path)
    logger.info(f"JSON store loaded from {store.path}")
    return store
