"""
Logging setup shared by every module
"""
import logging
import sys

from servtec.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str) -> logging.Logger:
    """
    Configure a module logger.

    Level comes from LOG_LEVEL; a stdout handler is attached the first time
    a given name is requested.
    """
    logger = logging.getLogger(name)
    level_name = get_settings().log_level.upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return setup_logger(name)


def mask_address(address: str) -> str:
    """Keep the first 8 characters of a phone number or chat id"""
    return f"{address[:8]}***" if address else ""
