"""Logging setup: console always, rotating file when a log directory is given."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Libraries that log every request / job submission at INFO
NOISY_LOGGERS = ("apscheduler", "urllib3", "sqlalchemy.engine")


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    resolved = logging.getLevelName(os.environ.get("JOBSFORCE_LOG_LEVEL", "INFO").upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(log_dir: Optional[str] = "logs", level: Optional[int] = None) -> logging.Logger:
    """Configure the ``jobsforce`` logger tree.

    ``level`` defaults to ``$JOBSFORCE_LOG_LEVEL`` (INFO when unset).
    Pass ``log_dir=None`` to log to stdout only.
    """
    level = _resolve_level(level)

    logger = logging.getLogger("jobsforce")
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        # 5MB per file, keep 3 backups
        file_handler = RotatingFileHandler(
            log_path / "jobsforce.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return logger
