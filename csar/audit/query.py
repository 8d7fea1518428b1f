"""Audit query helpers.

Standalone read-only queries over an audit JSONL file, so the CLI and the
HTTP server can inspect the trail without holding a logger instance.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from contracts.audit import AuditEntry, AuditEvent


def query_by_request(log_path: str | Path, request_id: str) -> list[AuditEntry]:
    """Return all audit entries for a given request_id."""
    return [e for e in read_entries(log_path) if e.request_id == request_id]


def query_by_event(
    log_path: str | Path, event: AuditEvent, limit: int = 100
) -> list[AuditEntry]:
    """Return recent entries of a given event type."""
    matches = [e for e in read_entries(log_path) if e.event == event]
    return matches[-limit:]


def tail(log_path: str | Path, n: int = 20) -> list[AuditEntry]:
    """Return the last N entries from the audit log."""
    entries = read_entries(log_path)
    return entries[-n:]


def query_filtered(
    log_path: str | Path,
    *,
    event: AuditEvent | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    request_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[AuditEntry], int]:
    """Return paginated, filtered audit entries.

    Returns (entries, total_matching_count), most recent first.
    """
    filtered = read_entries(log_path)

    if event is not None:
        filtered = [e for e in filtered if e.event == event]
    if request_id is not None:
        filtered = [e for e in filtered if e.request_id == request_id]
    if since is not None:
        filtered = [e for e in filtered if e.ts >= since]
    if until is not None:
        filtered = [e for e in filtered if e.ts <= until]

    total = len(filtered)
    filtered.sort(key=lambda e: e.ts, reverse=True)
    page = filtered[offset : offset + limit]
    return page, total


def read_entries(log_path: str | Path) -> list[AuditEntry]:
    p = Path(log_path)
    if not p.exists():
        return []
    entries: list[AuditEntry] = []
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            entries.append(AuditEntry(**json.loads(line)))
    return entries
