# scripts/run_pipeline_2_force.py
"""
Manual runner — Pipeline 2 (encode records)

Usage:
    python scripts/run_pipeline_2_force.py [configs/sink.yaml]
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from transcoder.batch.pipeline_2_encode_records import main as pipeline_2_main
from transcoder.utils.logging import get_logger


def main() -> int:
    logger = get_logger(__name__)

    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else REPO_ROOT / "configs/sink.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Required file missing: {config_path}")

    logger.info("=" * 80)
    logger.info("RUNNING PIPELINE 2 — ENCODE RECORDS")
    logger.info("Config: %s", config_path)
    logger.info("=" * 80)

    rc = pipeline_2_main(str(config_path))

    logger.info("Pipeline 2 finished with return code: %s", rc)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
