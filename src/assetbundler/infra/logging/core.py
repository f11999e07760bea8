from __future__ import annotations

"""
Logging Lifecycle.

Installs assetbundler's handlers on the root logger behind a single
QueueHandler. A QueueListener thread performs the actual console and file
I/O so builds never block on log output. Configuration is idempotent and
can be forced again, e.g. when the CLI switches to debug output.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from assetbundler.infra.logging.config import LoggingConfig, parse_level
from assetbundler.infra.logging.handlers import (
    create_console_handler,
    create_rotating_file_handler,
    is_managed_handler,
    tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_assetbundler_configured"
_QUEUE_LISTENER_ATTR: str = "_assetbundler_queue_listener"

# ==============================================================================
# PUBLIC API
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger for assetbundler.

    Args:
        cfg: Logging setup.
        force: Reinstall the handlers even when already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    level = parse_level(cfg.level)

    try:
        root.setLevel(level)
        _detach_managed_handlers(root)
        _stop_listener(root)

        handlers: List[logging.Handler] = []
        if cfg.console:
            handlers.append(create_console_handler(level, logging.Formatter(cfg.console_fmt)))
        if cfg.log_file:
            fh = create_rotating_file_handler(
                cfg.log_file,
                level,
                logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
                cfg.max_bytes,
                cfg.backup_count,
            )
            if fh:
                handlers.append(fh)

        if not handlers:
            return root

        log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
        listener.start()

        root.addHandler(tag_handler(QueueHandler(log_queue)))
        setattr(root, _QUEUE_LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_FLAG_ATTR, True)
        atexit.register(_safe_stop, listener)
        return root

    except Exception:
        # Never let logging setup abort a build; fall back to plain stderr
        _detach_managed_handlers(root)
        fallback = logging.StreamHandler(sys.stderr)
        fallback.setFormatter(logging.Formatter("FALLBACK | %(levelname)s | %(message)s"))
        root.addHandler(tag_handler(fallback))
        root.warning("Logging setup failed, using emergency console output.")
        return root


def get_logger(name: str) -> logging.Logger:
    """Return a named logger (usually __name__)."""
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Flush pending records and remove assetbundler's handlers."""
    root = logging.getLogger()
    _stop_listener(root)
    _detach_managed_handlers(root)
    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _detach_managed_handlers(root: logging.Logger) -> None:
    """Remove and close the handlers installed by this module."""
    for handler in list(root.handlers):
        if is_managed_handler(handler):
            root.removeHandler(handler)
            handler.close()


def _stop_listener(root: logging.Logger) -> None:
    """Stop the running QueueListener, if any."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _safe_stop(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop(listener: Optional[QueueListener]) -> None:
    """Stop a listener, tolerating listeners that were already stopped."""
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
