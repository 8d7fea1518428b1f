"""Line reader — turn a manifest byte/text source into its lines."""

from __future__ import annotations

from typing import IO, Union

from contracts.manifest import ManifestDecodeError

ManifestSource = Union[IO[bytes], IO[str], bytes, bytearray, str]

_BOM = "\ufeff"


def read_lines(source: ManifestSource | None) -> list[str]:
    """Decode *source* as UTF-8 and split it into lines.

    Empty lines are kept and nothing is trimmed. Raises ManifestDecodeError
    when the source is missing, unreadable, or not valid UTF-8.
    """
    if source is None:
        raise ManifestDecodeError("Manifest stream cannot be None")

    if isinstance(source, (bytes, bytearray, str)):
        raw: bytes | str = source
    else:
        try:
            raw = source.read()
        except (OSError, ValueError) as exc:
            raise ManifestDecodeError(f"Failed to read manifest stream: {exc}") from exc

    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestDecodeError(f"Manifest is not valid UTF-8: {exc}") from exc
    elif isinstance(raw, str):
        text = raw
    else:
        raise ManifestDecodeError(
            f"Manifest stream returned {type(raw).__name__}, expected bytes or str"
        )

    if text.startswith(_BOM):
        text = text[len(_BOM):]

    if not text:
        return []

    # Only \r and \n terminate a line; str.splitlines would also split on
    # form feeds and unicode separators.
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines
