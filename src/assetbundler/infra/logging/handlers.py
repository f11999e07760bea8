from __future__ import annotations

"""
Logging Handler Factories.

Creates the handlers installed by configure_logging() and marks them so a
later reconfiguration removes only what assetbundler added to the root
logger, never handlers installed by the host application.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_HANDLER_TAG_ATTR: str = "_assetbundler_handler"


def tag_handler(handler: logging.Handler) -> logging.Handler:
    """Mark a handler as managed by assetbundler and return it."""
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def is_managed_handler(handler: logging.Handler) -> bool:
    """Return True for handlers created by this package."""
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def create_console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    """Build the stderr handler."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return tag_handler(handler)


def create_rotating_file_handler(
        log_file: str,
        level: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Build a size-rotated file handler.

    Args:
        log_file: Target log path; missing parent directories are created.
        level: Numeric level of the handler.
        formatter: Formatter for file records.
        max_bytes: Rollover threshold.
        backup_count: Number of rotated files to keep.

    Returns:
        Optional[RotatingFileHandler]: The handler, or None when the file
                                       cannot be opened.
    """
    try:
        parent = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(parent, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open build log '{log_file}': {e}\n")
        return None

    handler.setLevel(level)
    handler.setFormatter(formatter)
    tag_handler(handler)
    return handler
