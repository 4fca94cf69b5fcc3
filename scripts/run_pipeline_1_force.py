# scripts/run_pipeline_1_force.py
"""
Manual runner — Pipeline 1 (decode documents)

Usage:
    python scripts/run_pipeline_1_force.py [configs/source.yaml]
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from transcoder.batch.pipeline_1_decode_documents import main as pipeline_1_main
from transcoder.utils.logging import get_logger


def main() -> int:
    logger = get_logger(__name__)

    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else REPO_ROOT / "configs/source.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Required file missing: {config_path}")

    logger.info("=" * 80)
    logger.info("RUNNING PIPELINE 1 — DECODE DOCUMENTS")
    logger.info("Config: %s", config_path)
    logger.info("=" * 80)

    rc = pipeline_1_main(str(config_path))

    logger.info("Pipeline 1 finished with return code: %s", rc)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
