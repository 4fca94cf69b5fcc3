# transcoder/core/formats.py
"""
Formats, content kinds and strategy resolution

Intent
- Format: what the caller configured (AUTO defers to the document).
- ContentKind: what the store says the document actually is.
- Strategy: which decode handler runs for a (kind, format) pair.

resolve_strategy() walks a fixed ladder; first match wins:

    JSON   + AUTO|JSON       -> JSON
    XML    + AUTO|XML        -> XML
    BINARY + AUTO|BLOB       -> BINARY
    any    + AUTO            -> BINARY
    TEXT   + DELIMITED       -> DELIMITED
    TEXT   + TEXT            -> TEXT

The AUTO fallback sits above the TEXT rows, so under AUTO a TEXT document is
handed over as raw bytes and never split as delimited lines.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple

from transcoder.core.errors import ConfigurationError, FormatMismatchError


class Format(str, Enum):
    AUTO = "auto"
    JSON = "json"
    XML = "xml"
    DELIMITED = "delimited"
    TEXT = "text"
    BLOB = "blob"

    @classmethod
    def parse(cls, value: "Format | str") -> "Format":
        """
        Case-insensitive lookup; unknown values raise ConfigurationError.
        """
        if isinstance(value, Format):
            return value
        if value is None:
            raise ConfigurationError("Format cannot be 'null'")
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown format for value: {value}") from e


class ContentKind(str, Enum):
    JSON = "json"
    XML = "xml"
    TEXT = "text"
    BINARY = "binary"


class Strategy(str, Enum):
    JSON = "json"
    XML = "xml"
    DELIMITED = "delimited"
    TEXT = "text"
    BINARY = "binary"


# (actual kind, accepted formats, resulting strategy)
_KIND_RULES: Tuple[Tuple[ContentKind, Tuple[Format, ...], Strategy], ...] = (
    (ContentKind.JSON, (Format.AUTO, Format.JSON), Strategy.JSON),
    (ContentKind.XML, (Format.AUTO, Format.XML), Strategy.XML),
    (ContentKind.BINARY, (Format.AUTO, Format.BLOB), Strategy.BINARY),
)


def resolve_strategy(kind: ContentKind, fmt: Format) -> Strategy:
    """
    Map (actual content kind, configured format) to a decode strategy.

    Raises FormatMismatchError naming both sides when nothing matches.
    """
    for expected_kind, accepted, strategy in _KIND_RULES:
        if kind == expected_kind and fmt in accepted:
            return strategy

    if fmt == Format.AUTO:
        return Strategy.BINARY

    if kind == ContentKind.TEXT and fmt == Format.DELIMITED:
        return Strategy.DELIMITED

    if kind == ContentKind.TEXT and fmt == Format.TEXT:
        return Strategy.TEXT

    raise FormatMismatchError(
        f"Type '{fmt.value}' from config is not compatible with type '{kind.value}' from document"
    )


__all__ = ["Format", "ContentKind", "Strategy", "resolve_strategy"]
