from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, and log file rotation logic.
"""

import logging
import time
from pathlib import Path
from typing import Generator

import pytest

from ncdudiff.infra.logging import (
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Clean up our root logger handlers before and after each test."""
    shutdown_logging()
    yield
    shutdown_logging()


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfigures_level() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert logging.getLogger().level == logging.DEBUG


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "nested" / "rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("Resolving a long chain of directories to trigger rotation." * 3)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "nested" / "rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """The root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(ours) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_default_log_path_is_in_user_dir() -> None:
    path = get_default_log_path()

    assert path.endswith("ncdudiff.log")
    assert "logs" in Path(path).parts


def test_shutdown_leaves_foreign_handlers() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"))
        shutdown_logging()

        assert foreign in root.handlers
        assert not any(getattr(h, _HANDLER_TAG_ATTR, False) for h in root.handlers)
        assert getattr(root, _QUEUE_LISTENER_ATTR) is None
    finally:
        root.removeHandler(foreign)


def test_unwritable_log_file_keeps_console_only(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")

    configure_logging(LoggingConfig(level="INFO", console=True, log_file=str(blocker / "x.log")))

    listener = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)
    assert len(listener.handlers) == 1
    assert isinstance(listener.handlers[0], logging.StreamHandler)
    assert "log file disabled" in capsys.readouterr().err
