"""Manifest validator — parse one manifest and record it in the audit trail."""

from __future__ import annotations

import uuid

from contracts.audit import AuditEntry, AuditEvent
from contracts.config import CsarKitConfig
from contracts.manifest import ManifestDecodeError, ManifestDocument, ManifestMessage

from csar.audit.logger import JsonlAuditLogger
from csar.line_reader import ManifestSource
from csar.manifest_parser import parse_manifest

_INVALID_LINE_PREFIX = ManifestMessage.INVALID_LINE.render(line="")


class ManifestValidator:
    """Runs the manifest parser and writes validation.* audit events."""

    def __init__(self, config: CsarKitConfig, logger: JsonlAuditLogger) -> None:
        self._config = config
        self._logger = logger

    def validate(
        self,
        stream: ManifestSource | None,
        source: str = "",
        request_id: str | None = None,
    ) -> tuple[str, ManifestDocument]:
        """Parse *stream*; return (request_id, document)."""
        request_id = request_id or str(uuid.uuid4())
        app_name = self._config.app.name

        self._logger.log(
            AuditEntry(
                request_id=request_id,
                event=AuditEvent.VALIDATION_START,
                app=app_name,
                source=source,
            )
        )

        def _on_decode_error(exc: ManifestDecodeError) -> None:
            self._logger.log(
                AuditEntry(
                    request_id=request_id,
                    event=AuditEvent.VALIDATION_ERROR,
                    app=app_name,
                    source=source,
                    detail={"decode_error": str(exc)},
                )
            )

        document = parse_manifest(stream, on_decode_error=_on_decode_error)

        for message in document.errors:
            if self._config.audit.redact_lines and message.startswith(_INVALID_LINE_PREFIX):
                message = _INVALID_LINE_PREFIX.rstrip(" :")
            self._logger.log(
                AuditEntry(
                    request_id=request_id,
                    event=AuditEvent.VALIDATION_ERROR,
                    app=app_name,
                    source=source,
                    detail={"message": message},
                )
            )

        self._logger.log(
            AuditEntry(
                request_id=request_id,
                event=AuditEvent.VALIDATION_END,
                app=app_name,
                source=source,
                detail={
                    "valid": document.is_valid,
                    "error_count": len(document.errors),
                    "metadata_keys": len(document.metadata),
                    "sources": len(document.sources),
                    "non_mano_groups": len(document.non_mano_sources),
                },
            )
        )

        return request_id, document
