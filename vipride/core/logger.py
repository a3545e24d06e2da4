import sys
import logging
from typing import Optional

from loguru import logger

from vipride.core.config import settings

# Third-party loggers that are far too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "sqlalchemy.pool", "aiomysql")


class InterceptHandler(logging.Handler):
    """Routes stdlib logging records (uvicorn, SQLAlchemy, aiomysql) into loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that actually issued the log call
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: Optional[str] = None, error_file: Optional[str] = None):
    """Console sink at LOG_LEVEL plus an ERROR file sink for failed bookings and pool rebuilds."""
    level = (level or settings.LOG_LEVEL).upper()
    error_file = error_file if error_file is not None else settings.LOG_ERROR_FILE

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )

    if error_file:
        logger.add(
            error_file,
            level="ERROR",
            rotation="10 MB",
            retention=settings.LOG_ERROR_RETENTION,
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging configured for {settings.PROJECT_NAME} (level={level}, errors -> {error_file or 'stdout only'})")


__all__ = ["logger", "setup_logging"]
