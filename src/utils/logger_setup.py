"""
Logging setup for recsync.

The CLI and the reconciliation scheduler log to stdout and to a rotating
file under ``Settings.LOGS_DIR``: tick start and finish, each upload and
its failure category, skipped ticks, contact loading and playback errors.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.settings import Settings

LOG_FILE_MAX_BYTES_DEFAULT = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT_DEFAULT = 5
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(module)s.%(funcName)s:%(lineno)d] - %(message)s"


def setup_logging(
    logger_name: str,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    log_file_max_bytes: int = LOG_FILE_MAX_BYTES_DEFAULT,
    log_file_backup_count: int = LOG_FILE_BACKUP_COUNT_DEFAULT,
    console_output: bool = True
) -> logging.Logger:
    """
    Configures and returns a named logger with console and rotating-file output.

    Calling it again for a logger that already has handlers only updates the
    level, so the CLI and tests can build several containers per process.

    Args:
        logger_name: The logger name; also the log file stem (e.g. "recsync" -> recsync.log).
        log_level: The minimum log level to capture (e.g., logging.INFO, logging.DEBUG).
        log_dir: The directory to store log files (defaults to Settings.LOGS_DIR).
        log_file_max_bytes: Maximum size of a log file before rotation.
        log_file_backup_count: Number of backup log files to keep.
        console_output: Whether to output logs to the console.

    Returns:
        A configured logger instance.
    """
    log_dir = Path(log_dir) if log_dir else Settings.LOGS_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(logger_name)

    # Already configured by an earlier call (CLI re-entry, tests)
    if logger.handlers:
        logger.setLevel(log_level)
        return logger

    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    sanitized_logger_name = "".join(c if c.isalnum() or c in ['_', '-'] else '_' for c in logger_name)
    log_file_path = log_dir / f"{sanitized_logger_name}.log"

    file_handler = RotatingFileHandler(
        log_file_path,
        maxBytes=log_file_max_bytes,
        backupCount=log_file_backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
