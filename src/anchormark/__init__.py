"""anchormark - durable text highlights for mutable documents.

Records a selected span as a reload-surviving anchor, resolves it back to
live text nodes after the document has been reflowed or rewritten, and
renders it as highlight markup.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from anchormark.config import Settings

__version__ = "0.1.0"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure logging to both console and rotating file."""
    if settings is None:
        from anchormark.config import get_settings

        settings = get_settings()

    log_dir = settings.app.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"anchormark.{os.getpid()}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.app.log_level.upper())
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())
