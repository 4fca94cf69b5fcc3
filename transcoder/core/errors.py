# transcoder/core/errors.py
"""
Transcoding errors

All failures raised by the decoder/encoder derive from TranscodingError, which is
a ValueError so callers that already guard bad input with `except ValueError`
keep working.

- ConfigurationError: format/delimiter/field setup is invalid for the direction
- FormatMismatchError: configured format does not accept the document's content kind
- ParseError: malformed JSON/XML, non-object records, invalid text encoding
- SchemaMismatchError: missing non-nullable value, wrong value type, column-count mismatch

The engine never retries or skips; the batch caller decides what to do.
"""

from __future__ import annotations


class TranscodingError(ValueError):
    """Base class for every decode/encode failure."""


class ConfigurationError(TranscodingError):
    pass


class FormatMismatchError(TranscodingError):
    pass


class ParseError(TranscodingError):
    pass


class SchemaMismatchError(TranscodingError):
    pass


__all__ = [
    "TranscodingError",
    "ConfigurationError",
    "FormatMismatchError",
    "ParseError",
    "SchemaMismatchError",
]
