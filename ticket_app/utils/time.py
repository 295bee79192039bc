"""
Wall-clock helpers for sale timing.

The engine measures everything in epoch milliseconds. ``SystemClock`` is
the production clock; tests substitute a clock whose sleeps advance a
virtual timeline.
"""

import threading
import time
from datetime import datetime
from typing import Optional


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def ms_to_hms(ms: int) -> tuple[int, int, float]:
    """
    Split a millisecond span into hours, minutes and fractional seconds.

    Args:
        ms: Span in milliseconds

    Returns:
        Tuple of (hours, minutes, seconds)
    """
    sec = ms / 1000.0
    hours = int(sec / 3600.0)
    rem = sec % 3600.0
    minutes = int(rem / 60.0)
    seconds = rem % 60.0
    return hours, minutes, seconds


def format_hms(ms: int) -> str:
    """Render a remaining-time span for the countdown display."""
    hours, minutes, seconds = ms_to_hms(ms)
    return f"{hours}h:{minutes}m:{seconds:.3f}s"


def format_epoch_ms(ts_ms: int) -> str:
    """Render an epoch-millisecond instant in local time."""
    return datetime.fromtimestamp(ts_ms / 1000.0).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class SystemClock:
    """Real clock backed by ``time.time`` and blocking waits."""

    def now_ms(self) -> int:
        return now_ms()

    def sleep_ms(self, ms: int) -> None:
        if ms > 0:
            time.sleep(ms / 1000.0)

    def wait(self, condition: threading.Condition, timeout_ms: Optional[int]) -> bool:
        """
        Block on ``condition`` for at most ``timeout_ms``.

        The caller must hold the condition's lock.
        """
        timeout = None if timeout_ms is None else max(timeout_ms, 0) / 1000.0
        return condition.wait(timeout)
