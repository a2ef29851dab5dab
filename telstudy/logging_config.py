"""Logging configuration helpers for TelStudy."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Optional

from .config import config


def configure_logging(level: Optional[str] = None) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=(level or config.logging.log_level).upper(),
        format=config.logging.log_format,
    )
    return logging.getLogger("telstudy")
