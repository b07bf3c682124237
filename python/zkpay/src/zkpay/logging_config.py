"""
Logging configuration for zkpay

Library modules only create loggers via ``logging.getLogger(__name__)``;
handlers are installed by applications through :func:`setup_logging`.
"""

import logging
import sys

SDK_LOGGER_NAME = "zkpay"

LOG_FORMAT = "%(asctime)s - %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s"


def setup_logging(level: int = logging.INFO, root: bool = False) -> logging.Logger:
    """
    Configure logging with timestamp, file and line number information

    Args:
        level: Logging level (default: INFO)
        root: Configure the root logger instead of the ``zkpay`` logger

    Returns:
        The configured logger
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    target = logging.getLogger() if root else logging.getLogger(SDK_LOGGER_NAME)
    target.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in target.handlers[:]:
        target.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    target.addHandler(console_handler)
    return target


def get_logger(name: str) -> logging.Logger:
    """Get a logger nested under the ``zkpay`` namespace"""
    if name != SDK_LOGGER_NAME and not name.startswith(SDK_LOGGER_NAME + "."):
        name = f"{SDK_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
