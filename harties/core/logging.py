"""
Logging configuration
"""

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str = "INFO"):
    """Setup logging configuration"""
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        colorize=True,
    )


# Create logger instance
log = logger
