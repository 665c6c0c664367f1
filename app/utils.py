"""
Shared helpers used across feature modules.
"""
import logging
import os
import sys


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Return a module logger writing to stderr.

    The level comes from the LOG_LEVEL environment variable (default INFO).
    Handlers are attached once per logger name so repeated imports don't
    duplicate output.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
        logger.propagate = False
    return logger


def page_to_offset(page: int, limit: int) -> int:
    """Convert a 1-based page number into a row offset."""
    return (max(page, 1) - 1) * limit


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit > 0 else 0
