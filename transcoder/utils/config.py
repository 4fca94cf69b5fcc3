# transcoder/utils/config.py
"""
Config Loader — Source (decode) and Sink (encode) YAML configs

Intent
- Load + validate the two YAML configs used by the batch drivers:
  - configs/source.yaml  (stored documents -> records)
  - configs/sink.yaml    (records -> stored payloads)
- Return **typed** configuration objects (Pydantic v2).
- Reject field/format combinations the engine cannot honour *before* any document
  is touched.

Source rules
- format: auto | json | xml | delimited | text | blob (case-insensitive)
- delimited requires a delimiter
- file_field (optional) must exist in the schema with type string
- payload_field (optional) must exist in the schema;
  format text -> payload must be string, format auto/blob -> payload must be bytes
- format auto -> every field except file_field must be nullable
  (the built-in default schema is exempt: it bypasses format detection)

Sink rules
- format: json | xml | delimited only
- delimited requires a delimiter
- file_name_field (optional) must exist in the schema

Schemas are written in the Avro-style record form (YAML mapping or JSON string),
see transcoder.core.schema.

Primary functions
- load_source_config(path="configs/source.yaml") -> SourceConfig
- load_sink_config(path="configs/sink.yaml") -> SinkConfig

External dependencies
- PyYAML: yaml.safe_load
- Pydantic v2: BaseModel, validators, model_validate
"""


from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from transcoder.core.encoder import ENCODABLE_FORMATS
from transcoder.core.formats import Format
from transcoder.core.schema import DEFAULT_SCHEMA, Schema
from transcoder.utils.logging import get_logger


def _coerce_schema(v: Any) -> Any:
    if v is None:
        return DEFAULT_SCHEMA
    if isinstance(v, Schema):
        return v
    return Schema.parse_json(v)


# -----------------------------
# Models
# -----------------------------
class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_file: Optional[str] = None


class SourceConfig(BaseModel):
    format: Format = Format.AUTO
    delimiter: Optional[str] = None
    output_schema: Schema = Field(default_factory=lambda: DEFAULT_SCHEMA)
    file_field: Optional[str] = None
    payload_field: Optional[str] = None
    encoding: str = "utf-8"

    # local batch driver
    input_dir: str = "raw_data/documents"
    output_jsonl: str = "artifacts/decoded_records.jsonl"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, v: Any) -> Format:
        return Format.parse(v)

    @field_validator("output_schema", mode="before")
    @classmethod
    def _parse_schema(cls, v: Any) -> Any:
        return _coerce_schema(v)

    @model_validator(mode="after")
    def _validate_fields(self) -> "SourceConfig":
        schema = self.output_schema
        fmt = self.format

        if fmt == Format.DELIMITED and not self.delimiter:
            raise ValueError("The delimiter must be set for format 'delimited'.")

        if self.file_field:
            f = schema.get_field(self.file_field)
            if f is None:
                raise ValueError(f"Schema must contain file field '{self.file_field}'.")
            if f.type != "string":
                raise ValueError(f"File field '{self.file_field}' must have type String.")

        if self.payload_field:
            f = schema.get_field(self.payload_field)
            if f is None:
                raise ValueError(f"Schema must contain payload field '{self.payload_field}'.")
            if fmt == Format.TEXT and f.type != "string":
                raise ValueError(f"Payload field '{self.payload_field}' must have type String.")
            if fmt in (Format.AUTO, Format.BLOB) and f.type != "bytes":
                raise ValueError(f"Payload field '{self.payload_field}' must have type Bytes.")

        if fmt == Format.AUTO and not schema.is_default():
            for f in schema.fields:
                if f.name != self.file_field and not f.nullable:
                    raise ValueError(f"Field '{f.name}' must be nullable for 'AUTO' format.")

        return self


class SinkConfig(BaseModel):
    format: Format = Format.JSON
    delimiter: Optional[str] = None
    path: str = "/"
    file_name_field: Optional[str] = None
    input_schema: Schema

    # local batch driver
    input_table: str = "raw_data/records.csv"
    input_format: Literal["csv", "tsv", "psv", "xlsx"] = "csv"
    sheet: Optional[str] = None
    encoding: str = "utf-8"
    output_dir: str = "artifacts/payloads"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, v: Any) -> Format:
        fmt = Format.parse(v)
        if fmt not in ENCODABLE_FORMATS:
            raise ValueError(f"Unsupported format: {fmt.value}")
        return fmt

    @field_validator("input_schema", mode="before")
    @classmethod
    def _parse_schema(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("input_schema is required")
        return _coerce_schema(v)

    @model_validator(mode="after")
    def _validate_fields(self) -> "SinkConfig":
        if self.format == Format.DELIMITED and not self.delimiter:
            raise ValueError("The delimiter must be set for format 'delimited'.")
        if self.file_name_field and self.input_schema.get_field(self.file_name_field) is None:
            raise ValueError(f"Schema must contain file name field '{self.file_name_field}'.")
        return self


# -----------------------------
# YAML helpers
# -----------------------------
def _load_yaml(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with p.open("r", encoding="utf-8") as f:
        text = f.read()

    # sanitize BEFORE YAML parse (NBSP / BOM / narrow NBSP)
    for ch in ["\u00A0", "\u2007", "\u202F", "\uFEFF"]:
        text = text.replace(ch, " ")

    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping/object: {path}")
    return data


def load_source_config(path: str = "configs/source.yaml") -> SourceConfig:
    logger = get_logger(__name__)
    raw = _load_yaml(path)
    try:
        cfg = SourceConfig.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid source config %s: %s", path, e)
        raise
    return cfg


def load_sink_config(path: str = "configs/sink.yaml") -> SinkConfig:
    logger = get_logger(__name__)
    raw = _load_yaml(path)
    try:
        cfg = SinkConfig.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid sink config %s: %s", path, e)
        raise
    return cfg


__all__ = [
    "LoggingConfig",
    "SourceConfig",
    "SinkConfig",
    "load_source_config",
    "load_sink_config",
]
