"""Client-side persisted state: bounded complaint history and language preference.

State lives in a single JSON object on disk, one value per key, mirroring
browser localStorage: ``complaints`` holds a JSON-encoded list of history
entries (most recent first), ``language`` holds the last selected code.
Everything here is best-effort: a missing or corrupt value reads as empty.
"""

import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ventapp.i18n import DEFAULT_LANGUAGE, Language

logger = structlog.get_logger()

HISTORY_KEY = "complaints"
LANGUAGE_KEY = "language"
HISTORY_LIMIT = 50


class KeyValueStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """KeyValueStore backed by one JSON file.

    Every ``set`` rewrites the whole file through a temp file and
    ``os.replace`` so readers never observe a half-written state.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_all(self) -> dict[str, object]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("state_file_corrupt", path=str(self._path))
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class MemoryStore:
    """In-process KeyValueStore, useful for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class HistoryEntry(BaseModel):
    """One complaint/response exchange."""

    complaint: str
    response: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


_entries_adapter = TypeAdapter(list[HistoryEntry])


class HistoryRepository:
    """Bounded most-recent-first queue of history entries.

    Invariant: the stored list never exceeds ``limit`` entries; on
    overflow the oldest entries are dropped.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limit: int = HISTORY_LIMIT,
        key: str = HISTORY_KEY,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self._store = store
        self._limit = limit
        self._key = key

    @property
    def limit(self) -> int:
        return self._limit

    def entries(self) -> list[HistoryEntry]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            return _entries_adapter.validate_json(raw)
        except ValidationError:
            logger.warning("history_corrupt", key=self._key)
            return []

    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """Push *entry* to the front and truncate; returns the stored list."""
        entries = [entry, *self.entries()][: self._limit]
        self._store.set(self._key, _entries_adapter.dump_json(entries).decode())
        return entries

    def clear(self) -> None:
        self._store.set(self._key, "[]")


class PreferencesRepository:
    """Last selected UI language."""

    def __init__(self, store: KeyValueStore, key: str = LANGUAGE_KEY) -> None:
        self._store = store
        self._key = key

    def get_language(self) -> Language:
        raw = self._store.get(self._key)
        try:
            return Language(raw) if raw else DEFAULT_LANGUAGE
        except ValueError:
            return DEFAULT_LANGUAGE

    def set_language(self, language: Language) -> None:
        self._store.set(self._key, language.value)
