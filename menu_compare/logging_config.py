"""Logging configuration using loguru"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# Console: bare messages normally; time, level and module when verbose
CONSOLE_FORMAT = "<level>{message}</level>"
CONSOLE_FORMAT_VERBOSE = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure loguru for console and optional file output.

    Both sinks follow ``verbose``: INFO normally, DEBUG with hop-by-hop
    request detail when set. Verbose console lines also carry time and module.

    Args:
        verbose: Enable debug-level logging
        log_file: Optional file path for log output
    """
    logger.remove()

    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT_VERBOSE if verbose else CONSOLE_FORMAT,
        level=level,
        colorize=True,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
        )
        logger.debug(f"Logging to file: {log_file}")
