"""Loguru sink configuration and stdlib logging bridge."""

from __future__ import annotations

import inspect
import logging
import sys

from loguru import logger

from store_provisioner.app.runtime.config.config_data import LoggingConfig

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers that should flow through loguru.
BRIDGED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic", "httpx")


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports it
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(config: LoggingConfig) -> None:
    """Install the stderr sink and route stdlib logging into loguru."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=config.level,
        format=LOG_FORMAT,
        serialize=config.json_output,
        backtrace=False,
        diagnose=False,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in BRIDGED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.debug(f"Logging configured at level {config.level}")
