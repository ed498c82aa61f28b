"""
Loguru sink configuration
"""

import sys

from loguru import logger

from school_portal.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Replace the default loguru sink with one honouring LOG_LEVEL."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        backtrace=settings.DEBUG,
        diagnose=settings.DEBUG,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )
