"""
Logging utilities for dpe_matcher CLI.

Provides logging setup with tqdm compatibility and an optional log file.
"""

import logging
import sys
import time
from pathlib import Path

from dpe_matcher.utils.tqdm_logging import TqdmLoggingHandler

# External loggers that are noisy at INFO/DEBUG
NOISY_LOGGERS = ("urllib3", "requests", "charset_normalizer")


def setup_logging(
    command_name: str,
    verbose: bool = False,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for a CLI command.

    Console output goes to stderr (stdout is reserved for results). With
    log_dir, a timestamped DEBUG-level log file is written as well.

    Args:
        command_name: Name of the command (for the logger and log file names)
        verbose: If True, show DEBUG messages on the console
        log_dir: Optional directory for log files

    Returns:
        Configured logger instance
    """
    console_level = logging.DEBUG if verbose else logging.INFO
    console_handler = TqdmLoggingHandler(level=console_level, stream=sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    handlers: list[logging.Handler] = [console_handler]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{command_name}_{timestamp}.log"
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    # Route package loggers (dpe_matcher.*) through our handlers
    for name in ("dpe_matcher", command_name):
        pkg_logger = logging.getLogger(name)
        pkg_logger.setLevel(logging.DEBUG)
        pkg_logger.handlers = list(handlers)
        pkg_logger.propagate = False  # Don't propagate to root

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.ERROR)

    logger = logging.getLogger(command_name)
    if log_dir is not None:
        logger.debug(f"Log file: {handlers[-1].baseFilename}")
    return logger
