"""Centralized logging configuration for the file manager entry points."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(
    log_file_prefix: str = "filemanager", log_dir: Path = Path("./logs")
) -> logging.Logger:
    """
    Configure logging for the application.

    Sets up console and rotating file logging with a shared format. Does
    nothing if the root logger already has handlers, so the CLI and the API
    can both call it.

    Args:
        log_file_prefix: Prefix for the log file name (default: "filemanager")
        log_dir: Directory that holds the log files

    Returns:
        Logger instance for the calling module
    """
    root_logger = logging.getLogger()

    if root_logger.handlers:
        return logging.getLogger(__name__)

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{log_file_prefix}.log"

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Console output goes to stderr so --json output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # 5 MB per file, 4 backups
    file_handler = RotatingFileHandler(
        log_file,
        mode="a",
        maxBytes=5 * 1024 * 1024,
        backupCount=4,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    return logging.getLogger(__name__)
