"""
Recent-input history kept in a key-value store.

The store is injected so the stages stay free of storage concerns; only the
coordinator reads and writes history. The list is bounded and ordered
most-recent-first.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from .logging import get_logger
from .schemas import HistoryEntry

logger = get_logger(__name__)

HISTORY_KEY = "ocr-analyzer-history"
MAX_HISTORY_ENTRIES = 5

_ENTRIES_ADAPTER = TypeAdapter(list[HistoryEntry])


class KeyValueStore(ABC):
    """Storage addressed by string keys holding JSON-serializable values."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is unset."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value under key."""


class InMemoryStore(KeyValueStore):
    """Store that lives for the process lifetime only."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStore(KeyValueStore):
    """Store persisted as a single JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        try:
            data = self._read()
        except ValueError as e:
            logger.warning("Overwriting unreadable storage file %s: %s", self.path, e)
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class HistoryStore:
    """
    Bounded list of recent inputs.

    Usage:
        history = HistoryStore(JsonFileStore(path))
        history.load()
        history.add(text)
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = HISTORY_KEY,
        max_entries: int = MAX_HISTORY_ENTRIES,
    ):
        self.store = store
        self.key = key
        self.max_entries = max_entries
        self._entries: list[HistoryEntry] = []

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def load(self) -> list[HistoryEntry]:
        """Read saved history. Unreadable data is logged and ignored."""
        try:
            raw = self.store.get(self.key)
        except (OSError, ValueError):
            logger.exception("Failed to read history from storage")
            raw = None

        if raw is None:
            self._entries = []
        else:
            try:
                self._entries = _ENTRIES_ADAPTER.validate_python(raw)[: self.max_entries]
            except ValidationError:
                logger.error("Failed to parse history from storage")
                self._entries = []

        return self.entries

    def add(self, text: str, now: Optional[float] = None) -> HistoryEntry:
        """Record an input as the most recent entry, evicting the oldest past the limit."""
        entry = HistoryEntry.from_input(text, now=now)
        self._entries = [entry, *self._entries][: self.max_entries]
        self._save()
        return entry

    def clear(self) -> None:
        self._entries = []
        self._save()

    def _save(self) -> None:
        self.store.set(self.key, _ENTRIES_ADAPTER.dump_python(self._entries, mode="json", by_alias=True))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]
