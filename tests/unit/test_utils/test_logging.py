"""Tests for the logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from nodeconsole.config.settings import LoggingConfig
from nodeconsole.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    package_logger = logging.getLogger("nodeconsole")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)


def added_handlers(package_logger: logging.Logger, before: list[logging.Handler]) -> list[logging.Handler]:
    return [h for h in package_logger.handlers if h not in before]


class TestSetupLogging:
    def test_repeated_calls_do_not_stack_handlers(self) -> None:
        before = list(logging.getLogger("nodeconsole").handlers)
        setup_logging()
        package_logger = setup_logging(LoggingConfig(level="DEBUG"))

        assert len(added_handlers(package_logger, before)) == 1
        assert package_logger.level == logging.DEBUG

    def test_foreign_handlers_are_kept(self) -> None:
        package_logger = logging.getLogger("nodeconsole")
        foreign = logging.NullHandler()
        package_logger.addHandler(foreign)
        setup_logging()
        setup_logging()
        assert foreign in package_logger.handlers

    def test_file_handler(self, tmp_path: Path) -> None:
        before = list(logging.getLogger("nodeconsole").handlers)
        log_file = tmp_path / "nodeconsole.log"
        package_logger = setup_logging(LoggingConfig(file=str(log_file)))

        handlers = added_handlers(package_logger, before)
        assert len(handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in handlers)

        package_logger.warning("written")
        for handler in handlers:
            handler.flush()
        assert "written" in log_file.read_text()

    def test_quiet_keeps_stderr_to_warnings(self, tmp_path: Path) -> None:
        before = list(logging.getLogger("nodeconsole").handlers)
        package_logger = setup_logging(
            LoggingConfig(level="DEBUG", file=str(tmp_path / "console.log")), quiet=True
        )
        handlers = added_handlers(package_logger, before)
        stream = next(h for h in handlers if not isinstance(h, logging.FileHandler))
        file_handler = next(h for h in handlers if isinstance(h, logging.FileHandler))

        assert stream.level == logging.WARNING
        assert file_handler.level == logging.NOTSET
