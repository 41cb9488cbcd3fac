"""
Route request history.

The last N route requests (endpoints, waypoints, mode) are kept in a small JSON
file so they can be re-run later. Failing to read or write the file never breaks
route planning: it is logged and the history behaves as empty / unsaved.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from routescout.domain.models import Point, TransportMode

logger = logging.getLogger(__name__)


class HistoryEntry(BaseModel):
    """Everything needed to recalculate a previous route."""

    model_config = ConfigDict(frozen=True)

    origin: Point
    destination: Point
    waypoints: list[Point] = Field(default_factory=list)
    mode: TransportMode = TransportMode.CAR
    created_at: datetime = Field(default_factory=lambda: datetime.now().replace(microsecond=0))

    @property
    def description(self) -> str:
        return f"{self.origin.name or '?'} -> {self.destination.name or '?'} ({self.mode.name})"

    def __str__(self) -> str:
        return f"[{self.created_at:%d/%m/%Y %H:%M}] {self.description}"


_HISTORY_ADAPTER = TypeAdapter(list[HistoryEntry])


class HistoryManager:
    """Most-recent-first list of `HistoryEntry`, persisted as JSON."""

    def __init__(self, path: str | Path, *, max_entries: int = 50):
        self._path = Path(path)
        self._max_entries = max_entries
        # Shared across API worker threads; guards `_entries` and the file.
        self._lock = threading.Lock()
        self._entries = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def entries(self) -> list[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    def add(self, entry: HistoryEntry) -> None:
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self._max_entries :]
            self._save()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._save()

    def _load(self) -> list[HistoryEntry]:
        if not self._path.exists():
            return []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            return _HISTORY_ADAPTER.validate_python(payload)[: self._max_entries]
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Could not read history from %s: %s", self._path, exc)
            return []

    def _save(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_bytes(_HISTORY_ADAPTER.dump_json(self._entries, indent=2))
            tmp.replace(self._path)
        except OSError as exc:
            logger.warning("Could not save history to %s: %s", self._path, exc)
