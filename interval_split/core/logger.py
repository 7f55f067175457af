"""loguru sinks for the interval-split CLI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <7}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {name}:{function}:{line} - {message}"


def setup_logger(level: str = "WARNING", log_file: Path | None = None) -> None:
    """Replace loguru's default handler with the CLI sinks.

    Status lines go to stdout, so log records stay on stderr. With
    ``log_file`` every record at ``level`` or above is also kept on disk,
    one file per day for a week.
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="1 day",
            retention="7 days",
            encoding="utf-8",
        )

    logger.debug("Logger initialized (level={}, file={})", level, log_file)
