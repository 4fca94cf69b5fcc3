# transcoder/batch/pipeline_2_encode_records.py
"""
Pipeline 2 — Encode table rows into stored payloads.

Intent
- Load the configured input table (csv/tsv/psv/xlsx) with every cell as text.
- Build one typed record per row (delimited text coercion rules).
- Encode each record (json/xml/delimited) and write it to its destination path.

Design decisions
- Non-nullable schema fields must exist as columns; nullable ones may be absent.
- Destination paths are store-style ("/base/<name>.<ext>"); locally they are written
  under {sink.output_dir} with the leading "/" dropped.

Output
- {sink.output_dir}/<sink.path>/<name><ext>
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from transcoder.core.destinations import destination_for_record
from transcoder.core.encoder import Payload, RecordEncoder
from transcoder.core.values import record_from_text
from transcoder.io.readers import read_input_table, validate_required_columns
from transcoder.io.writers import write_payload
from transcoder.utils.config import SinkConfig, load_sink_config
from transcoder.utils.logging import configure_logging, get_logger
from transcoder.utils.paths import repo_root_from_config_path, resolve_path

DEFAULT_CONFIG_PATH = "configs/sink.yaml"


def build_encoder(cfg: SinkConfig) -> RecordEncoder:
    return RecordEncoder(cfg.format, delimiter=cfg.delimiter)


def encode_table(cfg: SinkConfig, table_path: str | Path) -> List[Tuple[str, Payload]]:
    """
    Return (destination path, payload) for every row of the input table, in row order.
    """
    logger = get_logger(__name__)
    schema = cfg.input_schema

    df = read_input_table(table_path, cfg.input_format, sheet_name=cfg.sheet, encoding=cfg.encoding)
    validate_required_columns(df, [f.name for f in schema.fields if not f.nullable])

    encoder = build_encoder(cfg)
    out: List[Tuple[str, Payload]] = []
    for row in df.to_dict(orient="records"):
        record = record_from_text(schema, row)
        dest = destination_for_record(
            record,
            base_path=cfg.path,
            fmt=cfg.format,
            file_name_field=cfg.file_name_field,
        )
        out.append((dest, encoder.encode(record)))

    logger.info("Encoded %d record(s) as %s from %s", len(out), cfg.format.value, str(table_path))
    return out


def main(config_path: str = DEFAULT_CONFIG_PATH) -> int:
    cfg = load_sink_config(config_path)
    configure_logging(level=cfg.logging.level, log_file=cfg.logging.log_file)

    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    logger = get_logger(__name__, run_id=run_id)

    base_dir = repo_root_from_config_path(config_path)
    table_path = resolve_path(cfg.input_table, base_dir=base_dir)
    output_dir = resolve_path(cfg.output_dir, base_dir=base_dir)

    logger.info("Pipeline 2 started (format=%s input_table=%s)", cfg.format.value, str(table_path))
    written = encode_table(cfg, table_path)
    for dest, payload in written:
        write_payload(output_dir / dest.lstrip("/"), payload.text)

    logger.info("Pipeline 2 completed: wrote %d payload(s) under %s", len(written), str(output_dir))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
