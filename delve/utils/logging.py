"""Structured logging configuration."""

from __future__ import annotations

import logging
import sys
from typing import TextIO


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure the root logger with a clean format for episode output.

    Unknown level names fall back to INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)-5s] %(name)-25s | %(message)s",
        datefmt="%H:%M:%S",
    ))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)
