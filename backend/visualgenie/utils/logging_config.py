"""
Structured Logging Configuration for the VisualGenie backend

Uses loguru for production-ready logging with:
- Human-readable console output
- File rotation with compression
- Separate error log
- Interception of standard logging (uvicorn, SQLAlchemy)
"""

import sys
import logging
from pathlib import Path

from loguru import logger as loguru_logger

from visualgenie.config import settings


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}"


class InterceptHandler(logging.Handler):
    """Route standard logging records (uvicorn, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module to the real caller
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _add_file_sink(path: Path, level: str, retention: str) -> None:
    loguru_logger.add(
        path,
        format=FILE_FORMAT,
        level=level,
        rotation="00:00",  # New file at midnight
        retention=retention,
        compression="zip",
        backtrace=True,
        diagnose=settings.DEBUG,
        encoding="utf-8",
    )


def setup_logging() -> None:
    """
    Configure loguru sinks. Called once from the application lifespan.

    Console output always; app.log (INFO+) and error.log (ERROR+) under
    LOG_DIR when LOG_TO_FILE is enabled.
    """
    loguru_logger.remove()
    loguru_logger.configure(extra={"name": "root"})

    loguru_logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=settings.LOG_LEVEL,
        colorize=True,
        backtrace=True,
        diagnose=settings.DEBUG,
    )

    if settings.LOG_TO_FILE:
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        _add_file_sink(log_dir / "app.log", "INFO", "30 days")
        _add_file_sink(log_dir / "error.log", "ERROR", "90 days")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def get_logger(name: str):
    """
    Get a logger for a specific module.

    Usage:
        from visualgenie.utils.logging_config import get_logger
        logger = get_logger(__name__)
    """
    return loguru_logger.bind(name=name)


fastapi_logger = loguru_logger.bind(name="fastapi")
database_logger = loguru_logger.bind(name="database")
storage_logger = loguru_logger.bind(name="storage")
project_logger = loguru_logger.bind(name="project")
diagram_logger = loguru_logger.bind(name="diagram")
render_logger = loguru_logger.bind(name="render")
workflow_logger = loguru_logger.bind(name="workflow")


__all__ = [
    "setup_logging",
    "get_logger",
    "loguru_logger",
    "fastapi_logger",
    "database_logger",
    "storage_logger",
    "project_logger",
    "diagram_logger",
    "render_logger",
    "workflow_logger",
]
