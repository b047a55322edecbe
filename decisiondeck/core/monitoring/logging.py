# Standard library imports
from collections.abc import MutableMapping
from functools import lru_cache
import logging
import sys
from typing import Any

# Local application imports
from decisiondeck.settings import settings


class CustomFormatter(logging.Formatter):
    """
    Console formatter that colors records by level.
    """

    GREY = "\x1b[38;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    FORMATS = {
        logging.DEBUG: GREY + CONSOLE_FORMAT + RESET,
        logging.INFO: GREY + CONSOLE_FORMAT + RESET,
        logging.WARNING: YELLOW + CONSOLE_FORMAT + RESET,
        logging.ERROR: RED + CONSOLE_FORMAT + RESET,
        logging.CRITICAL: BOLD_RED + CONSOLE_FORMAT + RESET,
    }

    def format(self, record: logging.LogRecord) -> str:
        formatter = logging.Formatter(self.FORMATS.get(record.levelno, self.CONSOLE_FORMAT))
        return formatter.format(record)


ROOT_LOGGER_NAME = "decisiondeck"


def _attach_console_handler(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(CustomFormatter())
    logger.addHandler(console_handler)

    # Records stop here instead of reaching handlers on the root logger too
    logger.propagate = False


@lru_cache
def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger with the given name that writes to the console.

    Only the ``decisiondeck`` package logger owns a console handler; module
    loggers below it propagate to that one handler, so each record is
    printed once. Loggers outside the package get a handler of their own.
    ERROR records additionally reach Sentry in production through the
    LoggingIntegration configured in ``core.monitoring.sentry``.

    Args:
        name: The name of the logger
        level: Optional logging level override

    Returns:
        A configured logger instance
    """
    default_level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO
    logger = logging.getLogger(name)

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not package_logger.handlers:
            _attach_console_handler(package_logger, default_level)
        if level is not None:
            logger.setLevel(level)
        return logger

    if not logger.handlers:
        _attach_console_handler(logger, level if level is not None else default_level)
    return logger


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """
    Logger adapter that appends ``key=value`` context to each message.
    """

    def __init__(self, logger: logging.Logger, extra: dict[str, Any] | None = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        if self.extra:
            context_str = " ".join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"{msg} [{context_str}]"
        return msg, kwargs


def get_contextual_logger(name: str, **context: Any) -> LoggerAdapter:
    """
    Get a logger whose messages all carry the given context, e.g.
    ``get_contextual_logger(__name__, voter_id=..., position=...)``.
    """
    return LoggerAdapter(get_logger(name), context)
