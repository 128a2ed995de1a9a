"""Per-run loggers for CLI invocations."""

from __future__ import annotations

import logging

from .io_utils import RunPaths

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
LOG_FILENAME = "formreplay.log"


def _attach(
    logger: logging.Logger, handler: logging.Handler, level: int
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    return handler


def build_logger(run_paths: RunPaths, verbose: bool = False) -> logging.Logger:
    """Console output at INFO (DEBUG when verbose); the run's log file always gets DEBUG."""
    logger = logging.getLogger(f"formreplay.{run_paths.run_id}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    if logger.handlers:
        return logger

    _attach(logger, logging.StreamHandler(), logging.DEBUG if verbose else logging.INFO)
    log_path = run_paths.base_dir / LOG_FILENAME
    _attach(logger, logging.FileHandler(log_path, encoding="utf-8"), logging.DEBUG)
    return logger


def close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
