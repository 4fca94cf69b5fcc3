# transcoder/utils/logging.py
"""
Logging Utilities — one root configuration shared by the engine and batch drivers

Intent
- Configure root logging once; modules only ask for named loggers.
- Correlate lines from one batch run via `run_id` (injected into LogRecord).

What this module guarantees
- **Idempotent root configuration:** `configure_logging()` never duplicates handlers.
- **Stable log format:** timestamp | level | logger name | message.
- **Optional log-to-file:** a FileHandler is added next to the stream handler, once per path.

Primary API
- `configure_logging(level="INFO", log_file=None) -> None`
- `get_logger(name: str, run_id: str | None = None) -> logging.Logger`
  Lazily configures with defaults and (optionally) attaches a `RunIdFilter`.

Usage in this repo
- transcoder.core.decoder logs one DEBUG line per decoded document.
- transcoder.io.writers logs one INFO line per artifact.
- transcoder.batch.* log run progress at INFO with a run_id.
"""


from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

_CONFIGURED = False
_CURRENT_LOG_FILE: Optional[str] = None


class RunIdFilter(logging.Filter):
    """Inject run_id into log records."""

    def __init__(self, run_id: Optional[str] = None) -> None:
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging (idempotent for handlers).
    - Adds a StreamHandler only if none is attached yet.
    - If log_file is provided, adds a FileHandler for it unless one already targets that path.
    """
    global _CONFIGURED, _CURRENT_LOG_FILE

    root = logging.getLogger()
    root_level = getattr(logging, level.upper(), None)
    if not isinstance(root_level, int):
        raise ValueError(f"Invalid log level: {level}")
    root.setLevel(root_level)

    def _has_stream_handler() -> bool:
        return any(
            isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
            for h in root.handlers
        )

    def _has_file_handler(path: str) -> bool:
        target = Path(path).resolve()
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and Path(h.baseFilename).resolve() == target:
                return True
        return False

    formatter = logging.Formatter(fmt=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)

    if not _has_stream_handler():
        sh = logging.StreamHandler()
        sh.setFormatter(formatter)
        root.addHandler(sh)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        if not _has_file_handler(log_file):
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        _CURRENT_LOG_FILE = log_file

    _CONFIGURED = True


def get_logger(name: str, run_id: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger with consistent configuration.

    Notes:
    - Configures logging lazily with INFO level unless configured already.
    - Never adds per-logger handlers (handlers live on root).
    - If run_id is provided, attach a filter to this logger (idempotent per run_id).
    """
    if not _CONFIGURED:
        configure_logging(level="INFO", log_file=None)

    logger = logging.getLogger(name)

    if run_id is not None:
        if not any(isinstance(f, RunIdFilter) and f.run_id == run_id for f in logger.filters):
            logger.addFilter(RunIdFilter(run_id=run_id))

    return logger


__all__ = ["get_logger", "configure_logging", "RunIdFilter"]
