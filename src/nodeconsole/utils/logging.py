"""Logging setup for nodeconsole.

All modules log through ``logging.getLogger(__name__)`` below the
``nodeconsole`` package logger; this module is the one place that
attaches handlers to it.
"""

from __future__ import annotations

import logging
import sys

from nodeconsole.config.settings import LoggingConfig

PACKAGE_LOGGER = "nodeconsole"

# Set on handlers installed here so a later call can replace them.
_OWNED = "_nodeconsole_owned"


def setup_logging(config: LoggingConfig | None = None, quiet: bool = False) -> logging.Logger:
    """Configure the ``nodeconsole`` logger.

    Calling it again replaces the handlers a previous call installed and
    leaves handlers added by anyone else alone.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
        quiet: The terminal belongs to the interactive console. Only
               warnings and errors go to stderr; the configured level
               still applies to the log file.

    Returns:
        The configured package logger.
    """
    if config is None:
        config = LoggingConfig()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, _OWNED, False):
            package_logger.removeHandler(handler)
            handler.close()

    level = getattr(logging, config.level.upper(), logging.INFO)
    package_logger.setLevel(level)
    formatter = logging.Formatter(config.format)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(max(level, logging.WARNING) if quiet else level)
    _install(package_logger, stderr_handler, formatter)

    if config.file:
        _install(package_logger, logging.FileHandler(config.file), formatter)

    package_logger.debug("Logging initialized at %s level", config.level)
    return package_logger


def _install(logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setFormatter(formatter)
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)
