"""Manifest parser — SOL004 CSAR manifest (.mf) grammar.

The manifest is walked once, front to back, by an explicit state machine:

    Start -> MetadataHeader -> MetadataBody -> SourceDispatch
          -> NonManoHeader <-> NonManoBody -> Done

Each state is a small value object carrying only what its step needs, and
every step either consumes a line or ends the walk. A grammar violation
records one diagnostic and ends the walk; the completeness checks (metadata
and sources present) only run after a clean walk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence, Union

from contracts.manifest import ManifestDecodeError, ManifestDocument, ManifestMessage

from csar.line_reader import ManifestSource, read_lines

METADATA_HEADER = "metadata:"
SEPARATOR = ":"
SOURCE_KEY = "Source"
NON_MANO_KEY = "Non-MANO artifact sets"
SOURCE_PREFIX = SOURCE_KEY + SEPARATOR
NON_MANO_PREFIX = NON_MANO_KEY + SEPARATOR


# ── States ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Start:
    pass


@dataclass(frozen=True, slots=True)
class MetadataHeader:
    line: str


@dataclass(frozen=True, slots=True)
class MetadataBody:
    pass


@dataclass(frozen=True, slots=True)
class SourceDispatch:
    line: str


@dataclass(frozen=True, slots=True)
class NonManoHeader:
    line: str


@dataclass(frozen=True, slots=True)
class NonManoBody:
    group: str
    sources: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Done:
    pass


State = Union[Start, MetadataHeader, MetadataBody, SourceDispatch, NonManoHeader, NonManoBody, Done]


# ── Helpers ─────────────────────────────────────────────────────────


class LineCursor:
    """Forward-only cursor over the manifest lines."""

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = lines
        self._pos = 0

    def has_next(self) -> bool:
        return self._pos < len(self._lines)

    def next(self) -> str:
        if not self.has_next():
            raise IndexError("No more manifest lines")
        line = self._lines[self._pos]
        self._pos += 1
        return line


def _is_blank(line: str) -> bool:
    return not line.strip()


def _segments(text: str) -> list[str]:
    """Split on the separator, dropping trailing empty segments."""
    parts = text.split(SEPARATOR)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


# ── Parser ──────────────────────────────────────────────────────────


class ManifestParser:
    """One-shot parser; build a new instance per manifest."""

    def __init__(self, lines: Sequence[str]) -> None:
        self._cursor = LineCursor(lines)
        self._metadata: dict[str, str] = {}
        self._sources: list[str] = []
        self._non_mano_sources: dict[str, list[str]] = {}
        self._errors: list[str] = []
        self._handlers: dict[type, Callable[..., State]] = {
            Start: self._start,
            MetadataHeader: self._metadata_header,
            MetadataBody: self._metadata_body,
            SourceDispatch: self._source_dispatch,
            NonManoHeader: self._non_mano_header,
            NonManoBody: self._non_mano_body,
        }

    def parse(self) -> ManifestDocument:
        state: State = Start()
        while not isinstance(state, Done):
            state = self.step(state)

        if not self._errors:
            if not self._metadata:
                self._errors.append(ManifestMessage.NO_METADATA.render())
            if not self._sources:
                self._errors.append(ManifestMessage.NO_SOURCES.render())

        return ManifestDocument.build(
            metadata=self._metadata,
            sources=self._sources,
            non_mano_sources=self._non_mano_sources,
            errors=self._errors,
        )

    def step(self, state: State) -> State:
        """Run one transition and return the next state."""
        return self._handlers[type(state)](state)

    # ── transitions ─────────────────────────────────────────────────

    def _start(self, state: Start) -> State:
        if not self._cursor.has_next():
            self._errors.append(ManifestMessage.EMPTY.render())
            return Done()
        return MetadataHeader(self._cursor.next())

    def _metadata_header(self, state: MetadataHeader) -> State:
        if state.line.rstrip() != METADATA_HEADER:
            return self._invalid(state.line)
        return MetadataBody()

    def _metadata_body(self, state: MetadataBody) -> State:
        if not self._cursor.has_next():
            return Done()
        line = self._cursor.next()
        if _is_blank(line):
            return state

        key, sep, value = line.partition(SEPARATOR)
        if sep and key == NON_MANO_KEY:
            return SourceDispatch(line)
        if len(_segments(line)) < 2:
            return self._invalid(line)
        if key == SOURCE_KEY:
            return SourceDispatch(line)

        self._metadata[key.strip()] = value.strip()
        return state

    def _source_dispatch(self, state: SourceDispatch) -> State:
        line = state.line
        if _is_blank(line):
            return self._advance(SourceDispatch)
        if line.startswith(SOURCE_PREFIX):
            self._sources.append(line[len(SOURCE_PREFIX):].strip())
            return self._advance(SourceDispatch)
        if line.startswith(NON_MANO_PREFIX):
            return self._advance(NonManoHeader)
        return self._invalid(line)

    def _non_mano_header(self, state: NonManoHeader) -> State:
        line = state.line
        stripped = line.strip()
        if stripped == SOURCE_PREFIX:
            return self._invalid(line)
        if SEPARATOR not in line:
            return self._invalid(line)
        # a group header carries no value of its own
        if len(_segments(stripped)) > 1:
            return self._invalid(line)
        return NonManoBody(group=line.split(SEPARATOR, 1)[0].strip())

    def _non_mano_body(self, state: NonManoBody) -> State:
        if not self._cursor.has_next():
            self._non_mano_sources[state.group] = state.sources
            return Done()
        line = self._cursor.next()
        if _is_blank(line):
            return state
        stripped = line.strip()
        if stripped.startswith(SOURCE_PREFIX):
            state.sources.append(stripped[len(SOURCE_PREFIX):].strip())
            return state
        self._non_mano_sources[state.group] = state.sources
        return NonManoHeader(line)

    # ── internal ────────────────────────────────────────────────────

    def _advance(self, next_state: Callable[[str], State]) -> State:
        if not self._cursor.has_next():
            return Done()
        return next_state(self._cursor.next())

    def _invalid(self, line: str) -> State:
        self._errors.append(ManifestMessage.INVALID_LINE.render(line=line))
        return Done()


# ── Entry points ────────────────────────────────────────────────────


def parse_lines(lines: Sequence[str]) -> ManifestDocument:
    """Parse already-decoded manifest lines."""
    return ManifestParser(lines).parse()


def parse_manifest(
    source: ManifestSource | None,
    on_decode_error: Callable[[ManifestDecodeError], None] | None = None,
) -> ManifestDocument:
    """Read and parse a manifest stream.

    Never raises for malformed input: a stream that cannot be read or decoded
    yields a document whose only error is the internal parser error.
    *on_decode_error* receives the underlying failure, for logging.
    """
    try:
        lines = read_lines(source)
    except ManifestDecodeError as exc:
        if on_decode_error is not None:
            on_decode_error(exc)
        return ManifestDocument.build(errors=[ManifestMessage.PARSER_INTERNAL.render()])
    return parse_lines(lines)
