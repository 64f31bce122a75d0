from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the QueueListener architecture, idempotency of configuration,
log file rotation and the teardown helper.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path
from unittest.mock import patch

import pytest

from cntxtify.infra.logging import LoggingConfig, configure_logging, shutdown_logging
from cntxtify.infra.logging.config import parse_level
from cntxtify.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR
from cntxtify.infra.logging.handlers import _HANDLER_TAG_ATTR


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""

    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if isinstance(listener, QueueListener) and listener._thread is not None:
            listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)
        for h in list(root.handlers):
            if getattr(h, _HANDLER_TAG_ATTR, False):
                root.removeHandler(h)
                h.close()
        setattr(root, _CONFIGURED_FLAG_ATTR, False)

    _reset()
    yield
    _reset()


def _our_handlers() -> list:
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """TC-01: Repeated configuration does not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    initial = len(_our_handlers())
    configure_logging(cfg)

    assert initial == 1
    assert len(_our_handlers()) == initial


def test_force_reconfiguration_replaces_handlers() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    first_listener = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="DEBUG"), force=True)
    root = logging.getLogger()

    assert len(_our_handlers()) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not first_listener
    assert root.level == logging.DEBUG


def test_log_rotation(tmp_path: Path) -> None:
    """TC-02: The file rotates when the size limit is exceeded."""
    log_file = tmp_path / "logs" / "rotate.log"
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
        logger.debug("This is a long log message to trigger rotation." * 5)

    shutdown_logging()

    assert log_file.exists()
    assert (tmp_path / "logs" / "rotate.log.1").exists()


def test_queue_listener_architecture() -> None:
    """TC-03: The root logger holds a single QueueHandler fed to a listener."""
    configure_logging(LoggingConfig(level="INFO", console=True))
    root = logging.getLogger()

    assert len(_our_handlers()) == 1
    assert isinstance(getattr(root, _QUEUE_LISTENER_ATTR), QueueListener)


def test_unwritable_log_file_keeps_console(tmp_path: Path) -> None:
    """A log file that cannot be opened falls back to console-only output."""
    with patch("cntxtify.infra.logging.handlers.RotatingFileHandler", side_effect=PermissionError("denied")):
        configure_logging(LoggingConfig(level="INFO", console=True, log_file=str(tmp_path / "x.log")))

    listener = getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR)
    assert len(listener.handlers) == 1
    assert isinstance(listener.handlers[0], logging.StreamHandler)


def test_shutdown_is_safe_to_repeat() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    shutdown_logging()
    shutdown_logging()

    assert _our_handlers() == []
    assert getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR) is None


def test_records_reach_file(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(log_file)))

    logging.getLogger("cntxtify.test").warning("scan degraded")
    time.sleep(0.05)
    shutdown_logging()

    content = log_file.read_text(encoding="utf-8")
    assert "WARNING" in content
    assert "scan degraded" in content


def test_cli_settings_follow_debug_flag(tmp_path: Path) -> None:
    quiet = LoggingConfig.for_cli()
    verbose = LoggingConfig.for_cli(debug=True, log_file=str(tmp_path / "run.log"))

    assert quiet.level_no == logging.WARNING
    assert quiet.log_file is None
    assert verbose.level_no == logging.DEBUG
    assert verbose.log_file == str(tmp_path / "run.log")


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), (" Warn ", logging.WARNING), ("ERROR", logging.ERROR), ("", logging.WARNING), ("chatty", logging.WARNING)],
)
def test_parse_level(name: str, expected: int) -> None:
    assert parse_level(name) == expected
