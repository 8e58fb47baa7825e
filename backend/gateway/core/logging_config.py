"""
Logging Configuration

Console logging always; a rotating log file when ``AG_LOG_FILE`` is set.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> List[logging.Handler]:
    """
    Configure the root logger for the translator.

    Args:
        settings: Settings to use; defaults to the cached environment settings.

    Returns:
        The handlers installed on the root logger.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers: List[logging.Handler] = []

    if settings.log_file:
        log_dir = os.path.dirname(os.path.abspath(settings.log_file))
        os.makedirs(log_dir, exist_ok=True)
        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers.append(console_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if settings.log_file:
        logging.getLogger(__name__).info(f"Logging to file: {settings.log_file}")
    return handlers
