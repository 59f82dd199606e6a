from __future__ import annotations

"""
Logging Core Orchestrator.

Owns the lifecycle of the process-wide logging setup. The root logger gets a
single QueueHandler; the real sinks (stderr, rotating file) hang off a
QueueListener thread, so loader and resolver workers never block on I/O.
"""

import atexit
import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from ncdudiff.infra.fs import get_user_data_dir
from ncdudiff.infra.logging.config import LoggingConfig
from ncdudiff.infra.logging.handlers import _is_our_handler, _tag_handler, console_sink, file_sink

_CONFIGURED_FLAG_ATTR: str = "_ncdudiff_configured"
_QUEUE_LISTENER_ATTR: str = "_ncdudiff_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "ncdudiff.log") -> str:
    """Resolve the persistent log path within the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Install the queue-backed handlers on the root logger.

    A second call is a no-op unless `force` is set, in which case the
    previous handlers and listener are torn down first.

    Args:
        cfg: Sinks and level to install.
        force: Rebuild even if logging was configured already.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    shutdown_logging()
    level = _parse_level(cfg.level)
    root.setLevel(level)

    sinks: List[logging.Handler] = []
    if cfg.console:
        sinks.append(console_sink(level))
    log_file = file_sink(cfg, level)
    if log_file is not None:
        sinks.append(log_file)

    records: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = QueueListener(records, *sinks, respect_handler_level=True)
    listener.start()
    atexit.register(_stop_listener, listener)

    root.addHandler(_tag_handler(QueueHandler(records)))
    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    return root


def shutdown_logging() -> None:
    """
    Stop the listener and detach every handler this package installed.

    Handlers added by other code (test runners, libraries) are left alone.
    """
    root = logging.getLogger()
    _stop_listener(getattr(root, _QUEUE_LISTENER_ATTR, None))
    setattr(root, _QUEUE_LISTENER_ATTR, None)

    for handler in [h for h in root.handlers if _is_our_handler(h)]:
        root.removeHandler(handler)
        handler.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


def get_logger(name: str) -> logging.Logger:
    """Acquire a named logger (usually `__name__`)."""
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(name: str) -> int:
    """Map a level name to its number; unknown names mean WARNING."""
    value = logging.getLevelName(str(name or "").strip().upper())
    return value if isinstance(value, int) else logging.WARNING


def _stop_listener(listener: Optional[QueueListener]) -> None:
    # stop() joins the thread; a second call (atexit after shutdown) is skipped
    if listener is not None and getattr(listener, "_thread", None) is not None:
        listener.stop()
