"""Logging configuration for the Aribeth editor."""
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional
from loguru import logger

from utils.paths import get_writable_dir


SESSION_ID = datetime.now().strftime("%Y%m%d_%H%M%S")

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:{line} - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def configure_logging(log_dir: Optional[Path] = None, console_level: Optional[str] = None):
    """Configure Loguru logging."""
    logger.remove()

    log_dir = Path(log_dir) if log_dir else get_writable_dir("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    log_filter = os.getenv("LOG_FILTER", "")
    log_level = (console_level or os.getenv("LOG_LEVEL", "INFO")).upper()

    if log_filter:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format=CONSOLE_FORMAT,
            filter=lambda record: log_filter in record["name"]
        )
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=CONSOLE_FORMAT
        )

    logger.add(
        log_dir / f"app_{SESSION_ID}.log",
        rotation="5 MB",
        retention=5,
        level="DEBUG",
        format=FILE_FORMAT
    )

    logger.add(
        log_dir / "error.log",
        rotation="10 MB",
        retention="14 days",
        level="ERROR",
        format=FILE_FORMAT
    )

    return logger
