"""Shared contracts — source of truth for all CsarKit interfaces."""

from contracts.audit import AuditEntry, AuditEvent, AuditLogger
from contracts.config import AppInfo, AuditConfig, CsarKitConfig, ServerConfig, UploadConfig
from contracts.manifest import (
    ManifestDecodeError,
    ManifestDocument,
    ManifestMessage,
    ManifestReport,
)

__all__ = [
    # audit
    "AuditEntry",
    "AuditEvent",
    "AuditLogger",
    # config
    "AppInfo",
    "AuditConfig",
    "CsarKitConfig",
    "ServerConfig",
    "UploadConfig",
    # manifest
    "ManifestDecodeError",
    "ManifestDocument",
    "ManifestMessage",
    "ManifestReport",
]
