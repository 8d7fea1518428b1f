"""CsarKit FastAPI server — manifest upload validation."""

from __future__ import annotations

import io
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from contracts.audit import AuditEntry, AuditEvent
from contracts.config import CsarKitConfig

from csar.audit.logger import JsonlAuditLogger
from csar.audit.query import query_filtered, read_entries
from csar.config_loader import load_config
from csar.validator import ManifestValidator

VERSION = "0.1.0"

# ── Module-level state (set during lifespan) ─────────────────────────

_validator: ManifestValidator | None = None
_logger: JsonlAuditLogger | None = None
_config: CsarKitConfig | None = None
_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialise all components on startup."""
    global _validator, _logger, _config, _start_time  # noqa: PLW0603

    _start_time = time.time()

    _config = load_config(os.environ.get("CSARKIT_CONFIG"))
    _logger = JsonlAuditLogger(_config.audit.path)
    _validator = ManifestValidator(config=_config, logger=_logger)

    yield


app = FastAPI(title="CsarKit", version=VERSION, lifespan=lifespan)


# ── Endpoints ────────────────────────────────────────────────────────


@app.get("/v1/csarkit/health")
async def health() -> dict[str, Any]:
    """Extended health-check endpoint."""
    result: dict[str, Any] = {"status": "ok", "version": VERSION}

    result["uptime_seconds"] = round(time.time() - _start_time, 1) if _start_time else 0

    if _config:
        result["app"] = _config.app.name
        result["max_upload_bytes"] = _config.upload.max_bytes
        log_path = Path(_config.audit.path)
        if log_path.exists():
            result["audit_log_size_bytes"] = log_path.stat().st_size
            result["audit_log_entries"] = len(read_entries(log_path))

    return result


@app.post("/v1/csarkit/manifest/validate")
async def validate_manifest(
    request: Request,
    source: str = Query("", description="Manifest name recorded in the audit log"),
) -> JSONResponse:
    """Validate an uploaded manifest (raw request body)."""
    if _validator is None or _config is None:
        raise HTTPException(status_code=503, detail="Runtime not initialised")

    body = await request.body()
    if len(body) > _config.upload.max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Manifest exceeds {_config.upload.max_bytes} bytes",
        )

    request_id, document = _validator.validate(io.BytesIO(body), source=source)
    payload = document.to_report().model_dump(mode="json")
    payload["request_id"] = request_id
    status = 200 if document.is_valid else 422
    return JSONResponse(status_code=status, content=payload)


@app.get("/v1/csarkit/audit/logs")
async def audit_logs(
    event: AuditEvent | None = Query(None),
    since: datetime | None = Query(None),
    until: datetime | None = Query(None),
    request_id: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    """Filtered, paginated audit log query."""
    if _config is None:
        raise HTTPException(status_code=503, detail="Runtime not initialised")

    entries, total = query_filtered(
        _config.audit.path,
        event=event,
        since=since,
        until=until,
        request_id=request_id,
        limit=limit,
        offset=offset,
    )
    return {"entries": [e.model_dump(mode="json") for e in entries], "total": total}


@app.get("/v1/csarkit/audit/{request_id}")
async def audit_query(request_id: str) -> list[AuditEntry]:
    """Return audit entries for a given request_id."""
    if _logger is None:
        raise HTTPException(status_code=503, detail="Runtime not initialised")
    return _logger.query_by_request(request_id)
