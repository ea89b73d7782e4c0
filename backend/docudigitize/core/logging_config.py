"""
Centralized logging configuration for the DocuDigitize backend.

Every module logs through ``get_logger(__name__)``. ``setup_logging`` is
called once by the application on import; its defaults come from the
LOG_LEVEL, LOG_DIR, LOG_FILE and ENABLE_FILE_LOGGING environment variables.
"""
import logging
import sys
from pathlib import Path
from typing import Optional
import os

# Default log level from environment or INFO
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# File logging can be switched off (tests, read-only installs)
ENABLE_FILE_LOGGING = os.getenv("ENABLE_FILE_LOGGING", "true").lower() == "true"

# Log directory and file name inside it
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE_NAME = os.getenv("LOG_FILE", "docudigitize.log")

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Fixed levels for third-party loggers
LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    # AI SDKs and their HTTP transport
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "anthropic": logging.WARNING,
}


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    return handler


def _file_handler(log_path: Path) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setLevel(logging.DEBUG)  # File gets all logs
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    enable_file_logging: bool = ENABLE_FILE_LOGGING
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        log_file: Optional path to log file (defaults to LOG_DIR/LOG_FILE_NAME)
        enable_file_logging: Whether to add the file handler
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Root logger configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    # Console handler (always enabled)
    root_logger.addHandler(_console_handler(numeric_level))

    # File handler (optional)
    if enable_file_logging:
        log_path = LOG_DIR / LOG_FILE_NAME if log_file is None else Path(log_file)
        root_logger.addHandler(_file_handler(log_path))

    for name, level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
