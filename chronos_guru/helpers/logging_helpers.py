"""Logging helpers for Chronos Guru."""

import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{message}</level>"


def configure_logger(source: str, logs_dir: Path = Path("logs")) -> Path:
    """Configure Loguru logging and return the log file path pattern.

    Sinks: stderr at ERROR and above, plus a DEBUG file per source rotated
    at midnight, kept 7 days and zipped.
    """
    logger.remove()

    logger.add(sink=sys.stderr, level="ERROR", format=LOG_FORMAT)

    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{source}_{'{time:YYYYMMDD}'}.log"
    logger.add(
        sink=str(log_path),
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    logger.info(f"Logger configured for source '{source}' (file sink at '{log_path}')")
    return log_path


def add_console_verbosity(verbose: int) -> None:
    """Add a console sink for -v (INFO) or -vv (DEBUG)."""
    if verbose <= 0:
        return
    level = "DEBUG" if verbose > 1 else "INFO"
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)
