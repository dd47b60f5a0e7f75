"""Utility functions for spikemap.

General-purpose helpers: date / count formatting, timing.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from datetime import date as Date
from typing import Generator

logger = logging.getLogger(__name__)


def format_date(day: Date, fmt: str = "%B %-d") -> str:
    """strftime with portable no-padding day (``%-d``) support."""
    return day.strftime(fmt.replace("%-d", str(day.day)))


@contextmanager
def timer(label: str = "") -> Generator[None, None, None]:
    """Simple context-manager timer. Logs elapsed time on exit."""
    start = time.perf_counter()
    yield
    elapsed = time.perf_counter() - start
    if label:
        logger.info("[%s] %.3fs", label, elapsed)
    else:
        logger.info("Elapsed: %.3fs", elapsed)
