"""Utility exports for the movegrade package."""

from .generate_id import generate_id
from .logger import Logger, funclogger, get_logger
from .now import Now
from .to_int import to_int

__all__ = [
    "Logger",
    "Now",
    "funclogger",
    "generate_id",
    "get_logger",
    "to_int",
]
