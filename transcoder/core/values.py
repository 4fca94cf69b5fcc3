# transcoder/core/values.py
"""
Field value coercion (read + write)

Two source shapes feed records:
- tree values: what json.loads() or the XML tree converter produced
  (str/int/float/bool/None/list/dict)
- text segments: one column of a delimited line or a table cell

Read rules (tree values)
- string  <- str only
- boolean <- bool, or "true"/"false" (case-insensitive)
- int/long <- int (never bool), or an integer string; range-checked
- float/double <- int/float (never bool), or a numeric string
- bytes <- list of byte values (0..255; -128..-1 accepted as signed bytes),
           or a single byte value
- null  <- None; a blank string also reads as null for nullable non-string fields
           (XML has no null literal, an empty element arrives as "")

Read rules (text segments)
- ""    -> None for nullable fields, "" for non-nullable strings, error otherwise
- bytes are base64 text
- booleans must be exactly true/false (case-insensitive)

Write rules
- tree:  bytes -> list[int], everything else unchanged
- text:  None -> "", bool -> true/false, float -> repr (shortest round-trip),
         bytes -> base64

Every mismatch raises SchemaMismatchError naming the field.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Mapping

from transcoder.core.errors import SchemaMismatchError
from transcoder.core.schema import Record, Schema, SchemaField, check_value


def _mismatch(field: SchemaField, raw: Any) -> SchemaMismatchError:
    return SchemaMismatchError(
        f"Field '{field.name}' of type '{field.type}' cannot be read from value {raw!r}"
    )


def _parse_bool(field: SchemaField, raw: str) -> bool:
    s = raw.strip().lower()
    if s == "true":
        return True
    if s == "false":
        return False
    raise _mismatch(field, raw)


def _parse_int(field: SchemaField, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise _mismatch(field, raw) from e


def _parse_float(field: SchemaField, raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError as e:
        raise _mismatch(field, raw) from e


def _to_byte(field: SchemaField, raw: Any) -> int:
    if isinstance(raw, bool):
        raise _mismatch(field, raw)
    if isinstance(raw, str):
        raw = _parse_int(field, raw)
    if not isinstance(raw, int) or not -128 <= raw <= 255:
        raise _mismatch(field, raw)
    return raw & 0xFF


# ---------------------------------------------------------------------
# Tree values (JSON / XML)
# ---------------------------------------------------------------------


def read_tree_value(field: SchemaField, raw: Any) -> Any:
    """
    Coerce a JSON/XML tree value into the canonical Python value for `field`.
    """
    if raw is None:
        return check_value(field, None)

    t = field.type
    if t != "string" and isinstance(raw, str) and not raw.strip() and field.nullable:
        return None

    if t == "string":
        if isinstance(raw, str):
            return raw
        raise _mismatch(field, raw)

    if t == "boolean":
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            return _parse_bool(field, raw)
        raise _mismatch(field, raw)

    if t in ("int", "long"):
        if isinstance(raw, bool):
            raise _mismatch(field, raw)
        if isinstance(raw, str):
            raw = _parse_int(field, raw)
        if not isinstance(raw, int):
            raise _mismatch(field, raw)
        return check_value(field, raw)

    if t in ("float", "double"):
        if isinstance(raw, bool):
            raise _mismatch(field, raw)
        if isinstance(raw, str):
            return _parse_float(field, raw)
        if isinstance(raw, (int, float)):
            return check_value(field, raw)
        raise _mismatch(field, raw)

    # bytes
    if isinstance(raw, list):
        return bytes(_to_byte(field, b) for b in raw)
    if isinstance(raw, (int, str)):
        return bytes([_to_byte(field, raw)])
    raise _mismatch(field, raw)


def write_tree_value(field: SchemaField, value: Any) -> Any:
    if value is not None and field.type == "bytes":
        return list(value)
    return value


def read_tree_object(schema: Schema, obj: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Read every schema field out of a JSON object. Unknown keys are ignored.
    """
    return {f.name: read_tree_value(f, obj.get(f.name)) for f in schema.fields}


def record_to_tree(record: Record) -> Dict[str, Any]:
    """
    JSON-object form of a record, keys in schema order.
    """
    return {f.name: write_tree_value(f, v) for f, v in zip(record.schema.fields, record.values)}


# ---------------------------------------------------------------------
# Text segments (delimited lines / table cells)
# ---------------------------------------------------------------------


def read_text_value(field: SchemaField, raw: str) -> Any:
    if raw == "":
        if field.nullable:
            return None
        if field.type == "string":
            return ""
        raise SchemaMismatchError(f"Field '{field.name}' is not nullable but the value is empty")

    t = field.type
    if t == "string":
        return raw
    if t == "boolean":
        return _parse_bool(field, raw)
    if t in ("int", "long"):
        return check_value(field, _parse_int(field, raw))
    if t in ("float", "double"):
        return _parse_float(field, raw)

    try:
        return base64.b64decode(raw.strip(), validate=True)
    except binascii.Error as e:
        raise _mismatch(field, raw) from e


def write_text_value(field: SchemaField, value: Any) -> str:
    if value is None:
        return ""
    if field.type == "boolean":
        return "true" if value else "false"
    if field.type in ("float", "double"):
        return repr(float(value))
    if field.type == "bytes":
        return base64.b64encode(value).decode("ascii")
    return str(value)


def record_from_text(schema: Schema, row: Mapping[str, str]) -> Record:
    """
    Build a record from a mapping of column -> text cell. Missing columns read as "".
    """
    return Record.build(schema, {f.name: read_text_value(f, row.get(f.name, "")) for f in schema.fields})


__all__ = [
    "read_tree_value",
    "write_tree_value",
    "read_tree_object",
    "record_to_tree",
    "read_text_value",
    "write_text_value",
    "record_from_text",
]
