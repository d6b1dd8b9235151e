"""Logging utilities for the enrollment split pipeline."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    fmt: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
) -> None:
    """Configure logging for the pipeline.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        fmt: Log record format
        log_file: Optional file to mirror log output into

    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance

    """
    return logging.getLogger(name)


@contextmanager
def time_stage(stage: str, logger: logging.Logger) -> Iterator[None]:
    """Context manager for timing pipeline stages.

    Args:
        stage: Stage name for logging
        logger: Logger instance

    Yields:
        None

    """
    start_time = time.time()
    logger.info(f"[stage:start] {stage}")
    try:
        yield
    finally:
        duration = time.time() - start_time
        logger.info(f"[stage:end] {stage} ({duration:.2f}s)")
