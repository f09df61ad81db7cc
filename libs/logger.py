"""
Logging helpers shared by the scanner service.
Console handler always; dated file handler when a log dir is requested.
"""
import logging
import os
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
LOG_DIR = PROJECT_ROOT / "logs"

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    log_dir: str | None = None,
    level: int | str | None = None,
    log_to_file: bool = False,
) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional file handler.

    Args:
        name:        Logger name (usually the top-level package or __name__).
        log_dir:     Directory for log files (default: <project>/logs).
        level:       Logging level; defaults to the LOG_LEVEL env var or INFO.
        log_to_file: Whether to add a dated file handler.
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        log_dir = log_dir or LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        module_name = name.split(".")[-1]
        log_filename = f"{module_name}_{datetime.now().strftime('%Y%m%d')}.log"
        log_filepath = os.path.join(log_dir, log_filename)

        file_handler = logging.FileHandler(log_filepath, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        logger.info("Logging to file: %s", log_filepath)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Plain logger that inherits whatever configuration the entry point set up."""
    return logging.getLogger(name)
