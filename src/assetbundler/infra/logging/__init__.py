from __future__ import annotations

from .config import LoggingConfig, parse_level
from .core import configure_logging, get_logger, shutdown_logging

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "parse_level",
    "shutdown_logging",
]
