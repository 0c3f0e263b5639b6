import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

from rich.logging import RichHandler

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: LogLevel = "INFO",
    log_file: Path | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    logger_name: str | None = None,
) -> None:
    """Configure logging for an application using readwise_api.

    The library itself never calls this; applications opt in. Sets up a rich
    console handler and, when ``log_file`` is given, a rotating file handler.

    Args:
        level: The minimum logging level to capture.
        log_file: Optional path to a log file.
        max_bytes: The maximum size of the log file before rotation.
        backup_count: The number of backup log files to keep.
        logger_name: Logger to configure; the root logger by default.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    target = logging.getLogger(logger_name)
    target.setLevel(log_level)

    # Remove handlers from a previous call to avoid duplicated output
    for handler in target.handlers[:]:
        if isinstance(handler, (RichHandler, RotatingFileHandler)):
            target.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        level=log_level,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,  # Server responses may contain square brackets
    )
    console_handler.setFormatter(logging.Formatter("%(name)s - %(message)s", datefmt=DATE_FORMAT))
    target.addHandler(console_handler)

    if log_file is None:
        logger.debug("File logging skipped as no log_file was provided.")
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        filename=log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    target.addHandler(file_handler)
    logger.debug("Added RotatingFileHandler for file: %s", log_file)
