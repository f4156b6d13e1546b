"""Logger configuration and convenience helpers."""

from __future__ import annotations

import inspect
import logging
import sys
import time
from functools import wraps

_DEFAULT_LOGGER_NAME = "movegrade"
_DEFAULT_LOG_LEVEL = logging.INFO
_DEFAULT_FORMATTER = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
_DEFAULT_HANDLER = logging.StreamHandler(sys.stdout)
_DEFAULT_HANDLER.setFormatter(_DEFAULT_FORMATTER)


def _configure_logger(logger: logging.Logger, level: int) -> None:
    """
    Configure a logger with the given level and the shared stdout handler.

    The level is only applied when the logger has none of its own, a handler is
    attached once, and propagation to ancestor loggers is disabled so records
    are not duplicated.

    Parameters
    ----------
    logger : logging.Logger
        The logger instance to configure.
    level : int
        The logging level to set if the logger's level is not already set.
    """
    if logger.level == logging.NOTSET:
        logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(_DEFAULT_HANDLER)
    logger.propagate = False


def get_logger(name: str | None = None, level: int = _DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Return a configured logger for the given name."""
    logger = logging.getLogger(name or _DEFAULT_LOGGER_NAME)
    _configure_logger(logger, level)
    return logger


def set_level(level: int, logger_names: list[str] | None = None) -> None:
    """Set the log level for one or more logger names."""
    names = logger_names or [_DEFAULT_LOGGER_NAME, "uvicorn"]
    for name in names:
        logging.getLogger(name).setLevel(level)


class Logger(logging.Logger):
    """Custom Logger class for movegrade."""

    def __init__(self, name: str = _DEFAULT_LOGGER_NAME, level: int = _DEFAULT_LOG_LEVEL) -> None:
        super().__init__(name, level)
        _configure_logger(self, level)


def _log_call(logger: logging.Logger, function_name: str, args, kwargs) -> None:
    logger.debug("Starting %s", function_name)
    for i, arg in enumerate(args):
        logger.debug(" %s. %s (%s)", i, arg, type(arg).__name__)
    for key, value in kwargs.items():
        logger.debug(" - %s (%s): %s", key, type(value).__name__, value)


def funclogger(func):
    """Decorator to add debug logging to functions and coroutines:

    Logs the qualified function name and its arguments.
    Logs the end of the call with the elapsed time and return value.
    """
    function_name = func.__qualname__
    function_path = f"{func.__module__}.{function_name}".replace("<", "").replace(">", "")

    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = get_logger(function_path)
            _log_call(logger, function_name, args, kwargs)
            start_time = time.perf_counter()
            result = await func(*args, **kwargs)
            logger.debug(
                "Finished %s in %.4f seconds -> %s",
                function_name,
                time.perf_counter() - start_time,
                type(result).__name__,
            )
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(function_path)
        _log_call(logger, function_name, args, kwargs)
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        logger.debug(
            "Finished %s in %.4f seconds -> %s",
            function_name,
            time.perf_counter() - start_time,
            type(result).__name__,
        )
        return result

    return wrapper
