"""
Logging Configuration
====================

Centralized logging setup using loguru.
Structured JSON logs in production, colorful logs for development.
Modules keep using ``logging.getLogger(__name__)``; their records are
forwarded into loguru by :class:`InterceptHandler`.
"""

import logging
import sys

from loguru import logger

from photomap.core.config import Settings


class InterceptHandler(logging.Handler):
    """
    Redirect standard logging to Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(settings: Settings) -> None:
    """
    Configure logging based on environment.
    """
    logging.root.handlers = []
    logger.remove()

    if settings.APP_ENV == "production":
        logger.add(
            sys.stderr,
            format="{message}",
            serialize=True,
            level=settings.LOG_LEVEL,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
            colorize=True,
        )

    # Intercept standard library logs (uvicorn, sqlalchemy, photomap.*)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for _log in ["uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy"]:
        _logger = logging.getLogger(_log)
        _logger.handlers = [InterceptHandler()]
        _logger.propagate = False
