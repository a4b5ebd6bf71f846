"""Elapsed-time logging for calculation runs and per-store passes."""

import time
from contextlib import contextmanager

from grocery_pricing.logging import get_logger

logger = get_logger(__name__)

_TIMING_PREFIX = "[TIMING]"


def format_duration(ms: int) -> str:
    """12500 -> '12.5s', 750 -> '750ms'."""
    if ms >= 1000:
        return f"{ms / 1000:.1f}s"
    return f"{ms}ms"


class Stopwatch:
    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._start) * 1000)


@contextmanager
def time_span(name: str, **extra: object):
    """Log how long the block took, with optional key=value fields."""
    watch = Stopwatch()
    try:
        yield watch
    finally:
        elapsed = watch.elapsed_ms
        fields = " ".join(f"{k}={v}" for k, v in extra.items())
        logger.info(
            "%s %s elapsed_ms=%s (%s) %s",
            _TIMING_PREFIX,
            name,
            elapsed,
            format_duration(elapsed),
            fields,
        )
