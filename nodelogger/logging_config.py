"""
Logging Configuration
Sets up the loggers for the NodeLogger packages.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAMESPACES = ("nodelogger", "ui")


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Configures the 'nodelogger' and 'ui' loggers.

    Args:
        level: Logging level (e.g. logging.DEBUG or "DEBUG")
        log_file: Optional diagnostic log file. It is truncated on every call.
    """
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        try:
            handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
        except OSError as exc:
            print(f"Error [ResetFile]: {log_file}: {exc}", file=sys.stderr)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    for name in LOGGER_NAMESPACES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Avoid duplicate output when setup runs more than once
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        for handler in handlers:
            logger.addHandler(handler)

    logging.getLogger("nodelogger").info("Logging initialized.")
