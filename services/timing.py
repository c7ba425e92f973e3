"""Elapsed-time logging for the encode and remote edit steps."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional


@contextmanager
def log_timing(
    label: str, logger: Optional[logging.Logger] = None, level: int = logging.INFO
) -> Iterator[None]:
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        log = logger or logging.getLogger(__name__)
        log.log(level, "[Timing] %s took %.1f ms", label, elapsed_ms)
