"""
Logger Adapter Module

This module configures the application-wide logger shared by every layer of the
Dialog Flow Orchestrator. Messages use lazy %-style arguments so formatting is only
paid for when the level is enabled.
"""

import logging
import sys

from config import Config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = "dialog-orchestrator") -> logging.Logger:
    """
    Create (or return the already configured) named logger.

    Args:
        name (str): The logger name.

    Returns:
        logging.Logger: A logger writing to stdout at the configured level.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO))
    return logger


app_logger = get_logger()
