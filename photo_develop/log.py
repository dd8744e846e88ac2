"""Logging initialization using loguru."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

DEFAULT_LOG_DIR = Path.home() / ".photo_develop" / "logs"


def init_logging(log_dir: str | Path | None = None, level: str = "INFO") -> Path:
    """Route loguru to a rotating daily file in *log_dir* plus stderr; returns the log folder."""
    log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "develop_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    logger.add(sys.stderr, level=level)
    return log_path


def find_latest_log_file(log_dir: str | Path | None = None) -> Path | None:
    """Most recently modified ``develop_*.log`` in *log_dir*, if any."""
    log_path = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    try:
        log_files = list(log_path.glob("develop_*.log"))
        if not log_files:
            return None
        return max(log_files, key=lambda p: p.stat().st_mtime)
    except OSError:
        return None
