"""Append-only JSONL audit logger for manifest validations."""

from __future__ import annotations

import threading
from pathlib import Path

from contracts.audit import AuditEntry, AuditEvent, AuditLogger

from csar.audit.query import read_entries


class JsonlAuditLogger(AuditLogger):
    """Thread-safe, append-only JSONL audit logger."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def log(self, entry: AuditEntry) -> None:
        line = entry.model_dump_json() + "\n"
        with self._lock:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)

    def query_by_request(self, request_id: str) -> list[AuditEntry]:
        return [e for e in read_entries(self._path) if e.request_id == request_id]

    def query_by_event(self, event: AuditEvent, limit: int = 100) -> list[AuditEntry]:
        matches = [e for e in read_entries(self._path) if e.event == event]
        return matches[-limit:]

    def tail(self, n: int = 20) -> list[AuditEntry]:
        entries = read_entries(self._path)
        return entries[-n:]
