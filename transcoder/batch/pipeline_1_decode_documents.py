# transcoder/batch/pipeline_1_decode_documents.py
"""
Pipeline 1 — Decode stored documents into typed records.

Intent
- Walk a local directory that mirrors the document store.
- Decode every document with one RecordDecoder built from configs/source.yaml.
- Emit all records as a JSONL artifact (bytes as byte arrays, keys in schema order).

Design decisions
- Documents are processed in sorted path order for deterministic output.
- The first failing document aborts the run (errors propagate as raised).

Output
- {source.output_jsonl}
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from transcoder.core.decoder import RecordDecoder
from transcoder.core.values import record_to_tree
from transcoder.io.readers import iter_documents
from transcoder.io.writers import write_jsonl
from transcoder.utils.config import SourceConfig, load_source_config
from transcoder.utils.logging import configure_logging, get_logger
from transcoder.utils.paths import repo_root_from_config_path, resolve_path

DEFAULT_CONFIG_PATH = "configs/source.yaml"


def build_decoder(cfg: SourceConfig) -> RecordDecoder:
    return RecordDecoder(
        cfg.output_schema,
        cfg.format,
        delimiter=cfg.delimiter,
        file_name_field=cfg.file_field,
        payload_field=cfg.payload_field,
        encoding=cfg.encoding,
    )


def decode_documents(cfg: SourceConfig, input_dir: str | Path) -> List[Dict[str, Any]]:
    """
    Decode every document under input_dir; return JSON-ready record dicts in order.
    """
    logger = get_logger(__name__)
    decoder = build_decoder(cfg)

    rows: List[Dict[str, Any]] = []
    n_docs = 0
    for doc in iter_documents(input_dir):
        records = decoder.decode(doc)
        rows.extend(record_to_tree(r) for r in records)
        n_docs += 1

    logger.info("Decoded %d document(s) into %d record(s) from %s", n_docs, len(rows), str(input_dir))
    return rows


def main(config_path: str = DEFAULT_CONFIG_PATH) -> int:
    cfg = load_source_config(config_path)
    configure_logging(level=cfg.logging.level, log_file=cfg.logging.log_file)

    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    logger = get_logger(__name__, run_id=run_id)

    base_dir = repo_root_from_config_path(config_path)
    input_dir = resolve_path(cfg.input_dir, base_dir=base_dir)
    out_path = resolve_path(cfg.output_jsonl, base_dir=base_dir)

    logger.info("Pipeline 1 started (format=%s input_dir=%s)", cfg.format.value, str(input_dir))
    rows = decode_documents(cfg, input_dir)
    write_jsonl(out_path, rows)

    logger.info("Pipeline 1 completed: wrote %d record(s) to %s", len(rows), str(out_path))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
