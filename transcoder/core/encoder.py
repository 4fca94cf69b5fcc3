# transcoder/core/encoder.py
"""
RecordEncoder — typed record -> text payload

Formats
- json:      one object, keys in schema order, bytes as byte arrays, null -> null
- delimited: values joined by the delimiter, null -> empty segment
- xml:       the json object rendered as elements and wrapped in <root>...</root>

Only json | xml | delimited can be written; anything else is a ConfigurationError at
construction time, so a misconfigured sink fails before the first record.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from transcoder.core.errors import ConfigurationError
from transcoder.core.formats import Format
from transcoder.core.schema import Record
from transcoder.core.values import record_to_tree, write_text_value
from transcoder.core.xml_tree import tree_to_xml

ENCODABLE_FORMATS = (Format.JSON, Format.XML, Format.DELIMITED)

_XML_ROOT_TAG = "root"


@dataclass(frozen=True)
class Payload:
    text: str


class RecordEncoder:
    def __init__(self, fmt: Format | str, delimiter: Optional[str] = None) -> None:
        self.format = Format.parse(fmt)
        if self.format not in ENCODABLE_FORMATS:
            raise ConfigurationError(f"Unsupported format: {self.format.value}")
        if self.format == Format.DELIMITED and not delimiter:
            raise ConfigurationError("The delimiter must be set for format 'delimited'.")
        self.delimiter = delimiter

        self._handlers: Dict[Format, Callable[[Record], str]] = {
            Format.JSON: self._encode_json,
            Format.DELIMITED: self._encode_delimited,
            Format.XML: self._encode_xml,
        }

    def encode(self, record: Record) -> Payload:
        return Payload(text=self._handlers[self.format](record))

    def _encode_json(self, record: Record) -> str:
        return json.dumps(record_to_tree(record), ensure_ascii=False)

    def _encode_delimited(self, record: Record) -> str:
        return str(self.delimiter).join(
            write_text_value(f, v) for f, v in zip(record.schema.fields, record.values)
        )

    def _encode_xml(self, record: Record) -> str:
        return tree_to_xml(record_to_tree(record), root_tag=_XML_ROOT_TAG)


__all__ = ["ENCODABLE_FORMATS", "Payload", "RecordEncoder"]
