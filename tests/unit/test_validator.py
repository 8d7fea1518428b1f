"""Unit tests for the manifest validator service."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest

from contracts.audit import AuditEvent
from contracts.config import AuditConfig, CsarKitConfig
from contracts.manifest import ManifestMessage
from csar.audit.logger import JsonlAuditLogger
from csar.validator import ManifestValidator

VALID = b"metadata:\nname: pkg1\nSource: a.yaml\nNon-MANO artifact sets:\ng:\nSource: x\n"
INVALID = b"metadata:\nname: pkg1\nSource: a.yaml\nsecret: value\n"


def _validator(tmp_path: Path, redact: bool = False) -> tuple[ManifestValidator, JsonlAuditLogger]:
    config = CsarKitConfig(
        audit=AuditConfig(path=str(tmp_path / "audit.jsonl"), redact_lines=redact)
    )
    logger = JsonlAuditLogger(config.audit.path)
    return ManifestValidator(config=config, logger=logger), logger


class TestManifestValidator:
    def test_valid_manifest_audit_trail(self, tmp_path: Path) -> None:
        validator, logger = _validator(tmp_path)
        request_id, doc = validator.validate(io.BytesIO(VALID), source="pkg.mf")

        assert doc.is_valid is True
        entries = logger.query_by_request(request_id)
        assert [e.event for e in entries] == [
            AuditEvent.VALIDATION_START,
            AuditEvent.VALIDATION_END,
        ]
        end = entries[-1]
        assert end.source == "pkg.mf"
        assert end.app == "csarkit"
        assert end.detail == {
            "valid": True,
            "error_count": 0,
            "metadata_keys": 1,
            "sources": 1,
            "non_mano_groups": 1,
        }

    def test_invalid_manifest_logs_errors(self, tmp_path: Path) -> None:
        validator, logger = _validator(tmp_path)
        request_id, doc = validator.validate(io.BytesIO(INVALID))

        assert doc.is_valid is False
        errors = [
            e for e in logger.query_by_request(request_id)
            if e.event == AuditEvent.VALIDATION_ERROR
        ]
        assert len(errors) == 1
        assert errors[0].detail["message"] == doc.errors[0]
        assert "secret: value" in errors[0].detail["message"]

    def test_redacted_error_lines(self, tmp_path: Path) -> None:
        validator, logger = _validator(tmp_path, redact=True)
        request_id, doc = validator.validate(io.BytesIO(INVALID))

        errors = logger.query_by_event(AuditEvent.VALIDATION_ERROR)
        assert errors[0].detail["message"] == "Manifest contains invalid line"
        # the caller still sees the full diagnostic
        assert "secret: value" in doc.errors[0]

    def test_decode_error_logged(self, tmp_path: Path) -> None:
        validator, logger = _validator(tmp_path)
        request_id, doc = validator.validate(io.BytesIO(b"\xff\xfe\xfd"))

        assert doc.errors == [ManifestMessage.PARSER_INTERNAL.render()]
        details: list[dict[str, Any]] = [
            e.detail for e in logger.query_by_request(request_id)
            if e.event == AuditEvent.VALIDATION_ERROR
        ]
        assert "decode_error" in details[0]
        assert details[1] == {"message": ManifestMessage.PARSER_INTERNAL.render()}

    def test_request_id_passthrough(self, tmp_path: Path) -> None:
        validator, _ = _validator(tmp_path)
        request_id, _ = validator.validate(io.BytesIO(VALID), request_id="fixed-id")
        assert request_id == "fixed-id"

    @pytest.mark.parametrize("payload", [VALID, INVALID, b""])
    def test_end_event_always_written(self, tmp_path: Path, payload: bytes) -> None:
        validator, logger = _validator(tmp_path)
        request_id, _ = validator.validate(io.BytesIO(payload))
        assert logger.query_by_request(request_id)[-1].event == AuditEvent.VALIDATION_END
