"""Logging setup utilities for hidremote.

Configures logging for the whole package from the logging section of
the settings.
"""

from __future__ import annotations

import logging
import sys

from hidremote.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the ``hidremote`` logger.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("hidremote")
    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    formatter = logging.Formatter(config.format)

    # Replace handlers left by an earlier call
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.debug("Logging initialized at %s level", logging.getLevelName(level))
