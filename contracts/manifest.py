"""CSAR manifest contracts — parse result and diagnostics.

The parse result gates its data on validity: a manifest that produced any
diagnostic exposes its errors and nothing else.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr


class ManifestMessage(str, Enum):
    EMPTY = "Manifest file is empty"
    INVALID_LINE = "Manifest contains invalid line : {line}"
    NO_METADATA = "Manifest file doesn't contain metadata"
    NO_SOURCES = "Manifest file doesn't contain any sources"
    PARSER_INTERNAL = "Invalid manifest file, internal parser error"

    def render(self, **params: Any) -> str:
        return self.value.format(**params)


class ManifestDecodeError(Exception):
    """The manifest stream could not be read or decoded as UTF-8."""


class ManifestReport(BaseModel):
    """Serializable view of a parse result (CLI and HTTP payload)."""

    valid: bool
    metadata: dict[str, str] = {}
    sources: list[str] = []
    non_mano_sources: dict[str, list[str]] = {}
    errors: list[str] = []


class ManifestDocument(BaseModel):
    """Result of parsing one manifest. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    _metadata: dict[str, str] = PrivateAttr(default_factory=dict)
    _sources: list[str] = PrivateAttr(default_factory=list)
    _non_mano_sources: dict[str, list[str]] = PrivateAttr(default_factory=dict)
    _errors: list[str] = PrivateAttr(default_factory=list)

    @classmethod
    def build(
        cls,
        *,
        metadata: dict[str, str] | None = None,
        sources: list[str] | None = None,
        non_mano_sources: dict[str, list[str]] | None = None,
        errors: list[str] | None = None,
    ) -> ManifestDocument:
        doc = cls()
        doc._metadata = dict(metadata or {})
        doc._sources = list(sources or [])
        doc._non_mano_sources = {
            name: list(paths) for name, paths in (non_mano_sources or {}).items()
        }
        doc._errors = list(errors or [])
        return doc

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def metadata(self) -> dict[str, str]:
        if not self.is_valid:
            return {}
        return dict(self._metadata)

    @property
    def sources(self) -> list[str]:
        if not self.is_valid:
            return []
        return list(self._sources)

    @property
    def non_mano_sources(self) -> dict[str, list[str]]:
        if not self.is_valid:
            return {}
        return {name: list(paths) for name, paths in self._non_mano_sources.items()}

    @property
    def errors(self) -> list[str]:
        return list(self._errors)

    def to_report(self) -> ManifestReport:
        return ManifestReport(
            valid=self.is_valid,
            metadata=self.metadata,
            sources=self.sources,
            non_mano_sources=self.non_mano_sources,
            errors=self.errors,
        )

    def __repr__(self) -> str:
        return (
            f"ManifestDocument(valid={self.is_valid}, "
            f"sources={len(self._sources)}, errors={self._errors!r})"
        )
