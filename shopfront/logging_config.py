"""
logging_config.py: logging setup shared by the API, the CLI and scripts.

Console output goes through rich; an optional log file receives the plain
format below so it stays grep-friendly.
"""

import logging
from typing import Optional

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(message)s"

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "urllib3")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configures the root logger.

    Args:
        level (str): Log level name, e.g. "INFO" or "DEBUG".
        log_file (str, optional): Path of an additional plain-text log file.
    """
    handlers = [RichHandler(rich_tracebacks=True, show_path=False)]
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Returns the module logger; use with ``__name__``."""
    return logging.getLogger(name)
