# transcoder/core/decoder.py
"""
RecordDecoder — stored document -> typed records

Intent
- Turn one stored document (bytes + content kind + path) into zero or more records
  conforming to the declared schema.
- The file-name field (if declared) is always the document's display name, never content.

Flow
1) Declared schema == DEFAULT_SCHEMA -> default strategy (raw bytes, no format check).
2) Otherwise resolve_strategy(document.kind, format) picks one handler.
3) The handler fills the *modified schema* (declared minus file-name field) from content.
4) Each record gets the file-name field injected and is validated against the declared schema.

Strategies
- json:      top-level array -> one record per object; top-level object -> one record
- xml:       XML -> key/value tree, then unwrap singleton wrappers (see _unwrap_xml)
- delimited: one record per non-empty line, positional columns; first bad line aborts
- binary:    one record, payload field = raw bytes
- text:      one record, payload field = decoded text

Error handling
- FormatMismatchError / ParseError / SchemaMismatchError are raised as-is; nothing is
  skipped or repaired here. A document either decodes fully or raises.

Thread-safety
- Configuration and the modified schema are fixed at construction; decode() keeps no
  state between calls. Reuse sequentially, one instance per concurrent worker.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from transcoder.core.errors import ConfigurationError, ParseError, SchemaMismatchError
from transcoder.core.formats import ContentKind, Format, Strategy, resolve_strategy
from transcoder.core.schema import DEFAULT_SCHEMA, Record, Schema
from transcoder.core.values import read_text_value, read_tree_object
from transcoder.core.xml_tree import xml_to_tree
from transcoder.utils.logging import get_logger

# \v, \f and \x1c-\x1e are data, not line breaks
_LINE_BREAK = re.compile("\r\n|[\n\r\u2028\u2029\u0085]")

_BOM = "\ufeff"


@dataclass(frozen=True)
class Document:
    content: bytes
    kind: ContentKind
    path: str

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class RecordDecoder:
    def __init__(
        self,
        schema: Schema,
        fmt: Format | str = Format.AUTO,
        *,
        delimiter: Optional[str] = None,
        file_name_field: Optional[str] = None,
        payload_field: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.schema = schema
        self.format = Format.parse(fmt)
        self.delimiter = delimiter
        self.file_name_field = file_name_field or None
        self.payload_field = payload_field or None
        self.encoding = encoding
        self.modified_schema = schema.without_field(self.file_name_field)

        if self.format == Format.DELIMITED and not delimiter:
            raise ConfigurationError("The delimiter must be set for format 'delimited'.")

        self._handlers: Dict[Strategy, Callable[[str, bytes], List[Record]]] = {
            Strategy.JSON: self._decode_json,
            Strategy.XML: self._decode_xml,
            Strategy.DELIMITED: self._decode_delimited,
            Strategy.BINARY: self._decode_binary,
            Strategy.TEXT: self._decode_text,
        }
        self._logger = get_logger(__name__)

    def decode(self, document: Document) -> List[Record]:
        file_name = document.file_name

        if self.schema.is_default():
            records = self._decode_default(file_name, document.content)
            strategy_name = "default"
        else:
            strategy = resolve_strategy(document.kind, self.format)
            records = self._handlers[strategy](file_name, document.content)
            strategy_name = strategy.value

        self._logger.debug(
            "Decoded %s (kind=%s strategy=%s records=%d)",
            document.path,
            document.kind.value,
            strategy_name,
            len(records),
        )
        return records

    # -----------------------------
    # Shared helpers
    # -----------------------------
    def _build(self, file_name: str, values: Dict[str, Any]) -> Record:
        if self.file_name_field and self.schema.get_field(self.file_name_field) is not None:
            values[self.file_name_field] = file_name
        return Record.build(self.schema, values)

    def _text(self, content: bytes) -> str:
        try:
            return content.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f"Failed to decode document as {self.encoding}: {e}") from e

    def _read_object(self, file_name: str, obj: Any) -> Record:
        if not isinstance(obj, dict):
            raise ParseError(f"Failed to parse document, reason: expected an object, got {type(obj).__name__}")
        return self._build(file_name, read_tree_object(self.modified_schema, obj))

    def _records_from_tree(self, file_name: str, data: Any) -> List[Record]:
        if isinstance(data, list):
            return [self._read_object(file_name, item) for item in data]
        return [self._read_object(file_name, data)]

    def _single_payload(self, file_name: str, value: Any) -> List[Record]:
        if not self.payload_field:
            raise ConfigurationError(f"A payload field must be configured to decode '{file_name}' as a single payload")
        if self.modified_schema.get_field(self.payload_field) is None:
            raise SchemaMismatchError(f"Schema must contain payload field '{self.payload_field}'.")
        return [self._build(file_name, {self.payload_field: value})]

    # -----------------------------
    # Strategies
    # -----------------------------
    def _decode_default(self, file_name: str, content: bytes) -> List[Record]:
        return [self._build(file_name, {DEFAULT_SCHEMA.fields[0].name: content})]

    def _decode_json(self, file_name: str, content: bytes) -> List[Record]:
        text = self._text(content)
        if text.startswith(_BOM):
            text = text[len(_BOM):]
        try:
            data = json.loads(text)
        except ValueError as e:
            # JSONDecodeError, and int literals past the interpreter's digit limit
            raise ParseError(f"Failed to parse document, reason: {e}") from e
        return self._records_from_tree(file_name, data)

    def _decode_xml(self, file_name: str, content: bytes) -> List[Record]:
        return self._unwrap_xml(file_name, xml_to_tree(content))

    def _unwrap_xml(self, file_name: str, node: Dict[str, Any]) -> List[Record]:
        """
        Peel singleton wrapper elements until the records show up.

        - several keys                      -> this level is one record
        - no keys                           -> no records
        - one key, mapping value            -> descend into it
        - one key, list of mappings         -> one record per list item
        - one key naming a schema field     -> this level is one single-field record
          (scalar, or repeated elements of a bytes field)
        - one key, anything else            -> empty wrapper, no records
        """
        if len(node) > 1:
            return [self._read_object(file_name, node)]
        if not node:
            return []

        ((key, value),) = node.items()
        if isinstance(value, dict):
            return self._unwrap_xml(file_name, value)
        if isinstance(value, list) and all(isinstance(item, dict) for item in value):
            return self._records_from_tree(file_name, value)
        if self.modified_schema.get_field(key) is not None:
            return [self._read_object(file_name, node)]
        return []

    def _decode_delimited(self, file_name: str, content: bytes) -> List[Record]:
        fields = self.modified_schema.fields
        records: List[Record] = []

        for line_no, line in enumerate(_LINE_BREAK.split(self._text(content)), start=1):
            if not line:
                continue
            columns = line.split(self.delimiter)
            if len(columns) != len(fields):
                raise SchemaMismatchError(
                    f"Line {line_no} of '{file_name}' has {len(columns)} column(s), expected {len(fields)}"
                )
            values = {f.name: read_text_value(f, col) for f, col in zip(fields, columns)}
            records.append(self._build(file_name, values))

        return records

    def _decode_binary(self, file_name: str, content: bytes) -> List[Record]:
        return self._single_payload(file_name, content)

    def _decode_text(self, file_name: str, content: bytes) -> List[Record]:
        return self._single_payload(file_name, self._text(content))


__all__ = ["Document", "RecordDecoder"]
