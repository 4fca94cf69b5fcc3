# transcoder/io/writers.py
"""
Writers (decoded records + encoded payloads)

Intent
- Persist what the batch drivers produce:
  - JSONL for decoded records (one record per line)
  - plain text for encoded payloads (one file per record)

Primary functions
- ensure_parent_dir(path) -> None
- write_jsonl(path, records) -> None
- write_payload(path, text) -> None

Key behaviors / guarantees
- UTF-8 everywhere, ensure_ascii=False.
- JSONL keys keep the caller's order (record field order), so sort_keys is off.
- Parent directories are created recursively and idempotently before each write.
- Every write emits one INFO log line (path + rows or bytes).

Design notes
- Writers are thin: no schema enforcement, no value conversion.
  Callers hand over JSON-ready dicts (see transcoder.core.values.record_to_tree).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from transcoder.utils.logging import get_logger


def ensure_parent_dir(path: str | Path) -> None:
    """
    Ensure parent directory exists for the given file path.
    """
    parent = Path(path).parent
    if parent and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def write_jsonl(path: str | Path, records: Sequence[Mapping[str, Any]]) -> None:
    logger = get_logger(__name__)
    ensure_parent_dir(path)

    p = Path(path)
    with p.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    logger.info("Wrote JSONL: %s (rows=%d)", str(p), len(records))


def write_payload(path: str | Path, text: str) -> None:
    logger = get_logger(__name__)
    ensure_parent_dir(path)

    p = Path(path)
    data = text.encode("utf-8")
    p.write_bytes(data)

    logger.info("Wrote payload: %s (bytes=%d)", str(p), len(data))


__all__ = ["ensure_parent_dir", "write_jsonl", "write_payload"]
