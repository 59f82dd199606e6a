from __future__ import annotations

"""
Sink Factories.

Builds the stderr and rotating-file handlers drained by the queue listener,
and tags them so teardown can tell them apart from handlers installed by
pytest or third-party code.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from ncdudiff.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_ncdudiff_handler"

CONSOLE_FORMAT = "%(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def console_sink(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return _tag_handler(handler)


def file_sink(cfg: LoggingConfig, level: int) -> Optional[logging.Handler]:
    """
    Open the rotating log file named by `cfg.log_file`.

    A log file that cannot be opened must not abort a diff run, so the
    problem is reported on stderr and None is returned.
    """
    if not cfg.log_file:
        return None
    try:
        os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
        handler = RotatingFileHandler(
            cfg.log_file,
            maxBytes=cfg.max_bytes,
            backupCount=cfg.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"ncdudiff: log file disabled, cannot open '{cfg.log_file}': {e}\n")
        return None

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return _tag_handler(handler)
