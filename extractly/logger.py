"""
Logging helpers.

Call `setup_logging()` once at startup (the CLI does this), then in any module:

    from extractly.logger import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_FILENAME = "extractly.log"


def setup_logging(
    *,
    log_level: str | int = logging.INFO,
    log_path: str | Path | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger with a console handler and, when `log_path`
    is given, a rotating file handler.

    Args:
        log_level: Level name or number.
        log_path: Directory or file for the log file. A directory gets
                  `extractly.log` inside it.
        max_bytes: Rotate the file once it grows past this size.
        backup_count: Number of rotated files to keep.
    """
    level = _resolve_level(log_level)
    formatter = logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)

    handlers: list[logging.Handler] = []
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    handlers.append(console)

    if log_path is not None:
        file_handler = RotatingFileHandler(
            filename=_resolve_log_path(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> Logger:
    return logging.getLogger(name)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {level}")
    return resolved


def _resolve_log_path(target: str | Path) -> Path:
    target_path = Path(target)
    if target_path.suffix:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        return target_path
    target_path.mkdir(parents=True, exist_ok=True)
    return target_path / _DEFAULT_FILENAME
