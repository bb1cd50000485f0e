"""Loguru sinks for the activity log service."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def setup_logger(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Replace loguru's default sink with a stderr sink and, if configured, a rotating file."""
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, format=FILE_FORMAT, level=level, rotation="5 MB", retention=3, encoding="utf-8")

    logger.debug(f"Logging at {level}")
