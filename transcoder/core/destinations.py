# transcoder/core/destinations.py
"""
Destination paths for encoded payloads

    <base_path>/<name><extension>

- base_path gets a trailing "/" when missing
- name is the text form of a configured record field, or a random UUID4 when unset
- extension follows the written format: json -> .json, xml -> .xml, delimited -> .txt
"""

from __future__ import annotations

import uuid
from typing import Optional

from transcoder.core.errors import ConfigurationError, SchemaMismatchError
from transcoder.core.formats import Format
from transcoder.core.schema import Record
from transcoder.core.values import write_text_value

_EXTENSIONS = {
    Format.JSON: ".json",
    Format.XML: ".xml",
    Format.DELIMITED: ".txt",
}


def file_extension(fmt: Format | str) -> str:
    fmt = Format.parse(fmt)
    ext = _EXTENSIONS.get(fmt)
    if ext is None:
        raise ConfigurationError(f"Unsupported format: {fmt.value}")
    return ext


def build_destination_path(base_path: str, name: str, fmt: Format | str) -> str:
    base = base_path if base_path.endswith("/") else base_path + "/"
    return f"{base}{name}{file_extension(fmt)}"


def destination_for_record(
    record: Record,
    *,
    base_path: str,
    fmt: Format | str,
    file_name_field: Optional[str] = None,
) -> str:
    if file_name_field:
        field = record.schema.get_field(file_name_field)
        if field is None:
            raise SchemaMismatchError(f"Schema must contain file name field '{file_name_field}'.")
        value = record.get(file_name_field)
        if value is None:
            raise SchemaMismatchError(f"File name field '{file_name_field}' is null")
        name = write_text_value(field, value)
    else:
        name = str(uuid.uuid4())
    return build_destination_path(base_path, name, fmt)


__all__ = ["file_extension", "build_destination_path", "destination_for_record"]
