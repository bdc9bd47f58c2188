"""Logging configuration for hetzner-kube."""

import logging
import sys
from pathlib import Path

from hetzner_kube.exceptions import ConfigurationError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# hcloud and its transport log every API request at DEBUG
SDK_LOGGERS = ("urllib3", "hcloud")


def parse_level(level: str) -> int:
    """Translate a level name into a logging level.

    Raises:
        ConfigurationError: If the name is not one of LOG_LEVELS
    """
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ConfigurationError(
            f"Unknown log level '{level}'", f"Use one of: {', '.join(LOG_LEVELS)}"
        )
    return logging.getLevelName(name)


def setup_logging(
    level: str = "WARNING", log_file: Path | None = None, verbose: bool = False
) -> None:
    """Configure logging for a provisioning run.

    The console (stderr) shows records at ``level`` and above. A log file,
    when given, records everything from DEBUG so a failed run can be
    inspected afterwards. SDK request logging stays at WARNING.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        verbose: Shortcut for level DEBUG

    Raises:
        ConfigurationError: If level is not a known level name
    """
    console_level = logging.DEBUG if verbose else parse_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else console_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.warning(f"Failed to create log file handler: {e}")

    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
