"""
Logging setup shared by the API, services and scripts.

Every module obtains its logger through get_logger(__name__), so the
format and handlers are configured in exactly one place. Logs go to
stdout and, when a log directory is configured, to a daily log file.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


# Module-level flag to prevent duplicate handler registration
_logging_configured = False

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at DEBUG/INFO level
NOISY_LOGGERS = (
    "botocore",
    "boto3",
    "s3transfer",
    "urllib3",
    "httpx",
    "sqlalchemy.engine",
    "multipart",
)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Install the console handler (and optionally a daily file handler) on
    the root logger. Only the first call has any effect.

    Args:
        log_level: Logging level for the console (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for daily log files. None disables file logging.

    Returns:
        Configured root logger instance

    Example:
        >>> from winereview.core.logging_config import setup_logging
        >>> logger = setup_logging("INFO")
        >>> logger.info("Application started")
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)

    log_file = None
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"winereview_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)  # File captures everything
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True

    root_logger.debug(f"Logging configured: level={log_level}, file={log_file or '-'}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Module logger; callers pass __name__.
    """
    return logging.getLogger(name)


class LoggerMixin:
    """
    Gives subclasses a self.logger named after the concrete class.

    Example:
        >>> class ReviewService(LoggerMixin):
        ...     def create(self):
        ...         self.logger.info("Creating review")
    """

    @property
    def logger(self) -> logging.Logger:
        return get_logger(f"winereview.{self.__class__.__name__}")
