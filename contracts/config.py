"""CsarKit configuration (csarkit.yaml) schema — Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ── Sections ────────────────────────────────────────────────────────


class AppInfo(BaseModel):
    name: str = "csarkit"
    version: str = "0.1.0"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080


class UploadConfig(BaseModel):
    max_bytes: int = Field(default=1024 * 1024, gt=0)


class AuditConfig(BaseModel):
    path: str = "audit.jsonl"
    redact_lines: bool = False  # drop offending line text from error entries


# ── Root config ──────────────────────────────────────────────────────


class CsarKitConfig(BaseModel):
    app: AppInfo = AppInfo()
    server: ServerConfig = ServerConfig()
    upload: UploadConfig = UploadConfig()
    audit: AuditConfig = AuditConfig()
