"""Logging configuration utilities."""

import sys

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at the given level.

    stdout is left alone for the console game and any protocol output.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
            "<level>{message}</level>"
        ),
    )
