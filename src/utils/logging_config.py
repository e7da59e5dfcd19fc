"""
Logger setup for command line runs.

Library modules only create loggers with logging.getLogger(__name__);
handlers are attached here, once, by the entry point.
"""
import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'


def setup_logger(name: str = "", level: int = logging.WARNING,
                 log_file: Optional[str] = None) -> logging.Logger:
    """Attach console (and optional file) handlers to a logger, idempotently."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def verbosity_to_level(verbose: int) -> int:
    """0 -> WARNING, 1 -> INFO, 2+ -> DEBUG"""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG
