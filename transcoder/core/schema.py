# transcoder/core/schema.py
"""
Schema + Record model

Intent
- Describe the typed shape of records exchanged with the batch pipeline.
- Keep the shape immutable so one decoder/encoder can be reused across documents.

Schema
- Ordered, uniquely named fields; names follow Avro naming ([A-Za-z_][A-Za-z0-9_]*).
- Field types: string | boolean | int | long | float | double | bytes
- Nullability is a per-field flag.
- Parsed from / serialized to the Avro-style record JSON used by pipeline configs:

    {"type": "record", "name": "output",
     "fields": [{"name": "id", "type": "long"},
                {"name": "note", "type": ["string", "null"]}]}

Record
- One value per declared field, in schema order, type-checked on construction.
- int is a signed 32-bit range, long a signed 64-bit range.
- bool is never accepted where an integer or floating type is declared.
- Frozen after Record.build(); equality compares schema and values.

DEFAULT_SCHEMA
- The built-in single-field schema {payload: bytes}. A decoder configured with it
  copies raw document bytes and skips format detection.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from transcoder.core.errors import ConfigurationError, SchemaMismatchError

FieldType = Literal["string", "boolean", "int", "long", "float", "double", "bytes"]

_FIELD_TYPES = ("string", "boolean", "int", "long", "float", "double", "bytes")

_INT_RANGE = (-(2**31), 2**31 - 1)
_LONG_RANGE = (-(2**63), 2**63 - 1)

# Avro names, which are also valid XML element names
_FIELD_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class SchemaField(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    type: FieldType
    nullable: bool = False

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        if not _FIELD_NAME.fullmatch(v):
            raise ValueError(f"Invalid field name {v!r}: expected letters, digits or '_', not starting with a digit")
        return v


class Schema(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "output"
    fields: Tuple[SchemaField, ...]

    @field_validator("fields")
    @classmethod
    def _validate_unique_names(cls, v: Tuple[SchemaField, ...]) -> Tuple[SchemaField, ...]:
        seen = set()
        for f in v:
            if f.name in seen:
                raise ValueError(f"Duplicate field name in schema: {f.name}")
            seen.add(f.name)
        return v

    # -----------------------------
    # Lookup
    # -----------------------------
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[SchemaField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def index_of(self, name: str) -> int:
        for i, f in enumerate(self.fields):
            if f.name == name:
                return i
        raise KeyError(name)

    # -----------------------------
    # Derived schemas
    # -----------------------------
    def without_field(self, name: Optional[str]) -> "Schema":
        """
        Copy of this schema minus `name` (order preserved). No-op if absent/None.
        """
        if not name or self.get_field(name) is None:
            return self
        return Schema(name=self.name, fields=tuple(f for f in self.fields if f.name != name))

    def is_default(self) -> bool:
        return self.fields == DEFAULT_SCHEMA.fields

    # -----------------------------
    # JSON form
    # -----------------------------
    @classmethod
    def parse_json(cls, value: Union[str, Mapping[str, Any]]) -> "Schema":
        """
        Parse the Avro-style record schema (string or already-loaded mapping).

        Raises ConfigurationError("Invalid schema: ...") on any structural problem.
        """
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid schema: {e}") from e

        if not isinstance(value, Mapping):
            raise ConfigurationError("Invalid schema: expected a JSON object")
        if value.get("type", "record") != "record":
            raise ConfigurationError(f"Invalid schema: top-level type must be 'record', got {value.get('type')!r}")

        raw_fields = value.get("fields")
        if not isinstance(raw_fields, list) or not raw_fields:
            raise ConfigurationError("Invalid schema: 'fields' must be a non-empty list")

        fields = []
        for raw in raw_fields:
            if not isinstance(raw, Mapping) or "name" not in raw:
                raise ConfigurationError(f"Invalid schema: bad field entry {raw!r}")
            ftype, nullable = _parse_field_type(raw.get("type"), raw["name"])
            try:
                fields.append(SchemaField(name=str(raw["name"]), type=ftype, nullable=nullable))
            except ValueError as e:
                raise ConfigurationError(f"Invalid schema: {e}") from e

        try:
            return cls(name=str(value.get("name") or "output"), fields=tuple(fields))
        except ValueError as e:
            raise ConfigurationError(f"Invalid schema: {e}") from e

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": "record",
            "name": self.name,
            "fields": [
                {"name": f.name, "type": [f.type, "null"] if f.nullable else f.type}
                for f in self.fields
            ],
        }


def _parse_field_type(raw: Any, field_name: str) -> Tuple[FieldType, bool]:
    if isinstance(raw, Mapping):
        raw = raw.get("type")

    if isinstance(raw, str):
        if raw in _FIELD_TYPES:
            return raw, False  # type: ignore[return-value]
        raise ConfigurationError(f"Invalid schema: unsupported type {raw!r} for field '{field_name}'")

    if isinstance(raw, list):
        non_null = [t for t in raw if t != "null"]
        if len(raw) == 2 and len(non_null) == 1 and non_null[0] in _FIELD_TYPES:
            return non_null[0], True
        raise ConfigurationError(
            f"Invalid schema: only [<type>, 'null'] unions are supported (field '{field_name}')"
        )

    raise ConfigurationError(f"Invalid schema: missing type for field '{field_name}'")


DEFAULT_SCHEMA = Schema(name="output", fields=(SchemaField(name="payload", type="bytes"),))


# ---------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------


def check_value(field: SchemaField, value: Any) -> Any:
    """
    Validate a native Python value against a field and return its canonical form.
    """
    if value is None:
        if field.nullable:
            return None
        raise SchemaMismatchError(f"Field '{field.name}' is not nullable but no value was provided")

    t = field.type
    if t == "string" and isinstance(value, str):
        return value
    if t == "boolean" and isinstance(value, bool):
        return value
    if t in ("int", "long") and isinstance(value, int) and not isinstance(value, bool):
        lo, hi = _INT_RANGE if t == "int" else _LONG_RANGE
        if not lo <= value <= hi:
            raise SchemaMismatchError(f"Field '{field.name}' value is out of range for type '{t}'")
        return value
    if t in ("float", "double") and isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return float(value)
        except OverflowError as e:
            raise SchemaMismatchError(f"Field '{field.name}' value is out of range for type '{t}'") from e
    if t == "bytes" and isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    raise SchemaMismatchError(
        f"Field '{field.name}' of type '{t}' cannot hold a value of type '{type(value).__name__}'"
    )


@dataclass(frozen=True)
class Record:
    schema: Schema
    values: Tuple[Any, ...]

    @classmethod
    def build(cls, schema: Schema, values: Mapping[str, Any]) -> "Record":
        unknown = [k for k in values if schema.get_field(k) is None]
        if unknown:
            raise SchemaMismatchError(f"Unknown fields for schema '{schema.name}': {unknown}")
        return cls(schema=schema, values=tuple(check_value(f, values.get(f.name)) for f in schema.fields))

    def get(self, name: str) -> Any:
        return self.values[self.schema.index_of(name)]

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: v for f, v in zip(self.schema.fields, self.values)}


__all__ = [
    "FieldType",
    "SchemaField",
    "Schema",
    "DEFAULT_SCHEMA",
    "Record",
    "check_value",
]
