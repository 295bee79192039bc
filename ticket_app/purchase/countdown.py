"""
Cooperative countdown to the sale-open instant.

The countdown waits on three sources at once: an external cancel, a
periodic timer tick, and its own "threshold crossed" notification. All
three meet in a single condition wait; when more than one is ready,
cancel wins over readiness, and readiness wins over a tick.
"""

import sys
import threading
from enum import Enum
from typing import Any, Optional, TextIO

from ..errors import CountdownCancelledError
from ..logging.config import get_logger
from ..utils.time import SystemClock, format_hms

logger = get_logger(__name__)


class Wakeup(str, Enum):
    """Why a countdown wait returned, in priority order."""
    CANCELLED = "cancelled"
    READY = "ready"
    TICK = "tick"


class SaleCountdown:
    """Counts down to ``sale_open_ms - lead_ms`` and hands off to the burst."""

    def __init__(
        self,
        poll_interval_ms: int,
        clock: Optional[Any] = None,
        stream: Optional[TextIO] = None,
        show_progress: bool = True,
    ) -> None:
        self.poll_interval_ms = poll_interval_ms
        self.clock = clock or SystemClock()
        self.stream = stream
        self.show_progress = show_progress
        self.logger = logger

        self._condition = threading.Condition()
        self._cancelled = False
        self._ready = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Interrupt any current or future countdown. Safe from any thread."""
        with self._condition:
            self._cancelled = True
            self._condition.notify_all()

    def reset(self) -> None:
        """Clear a previous cancel so the countdown can be reused."""
        with self._condition:
            self._cancelled = False
            self._ready = False

    def _notify_ready(self) -> None:
        with self._condition:
            self._ready = True
            self._condition.notify_all()

    def select(self, timeout_ms: int) -> Wakeup:
        """Block until an event source fires or ``timeout_ms`` passes."""
        with self._condition:
            if not (self._cancelled or self._ready):
                self.clock.wait(self._condition, timeout_ms)

            if self._cancelled:
                return Wakeup.CANCELLED
            if self._ready:
                return Wakeup.READY
            return Wakeup.TICK

    def await_sale_window(self, sale_open_ms: int, lead_ms: int) -> bool:
        """
        Wait until the sale window (minus lead time) is reached.

        Args:
            sale_open_ms: Sale-open instant in epoch milliseconds
            lead_ms: How early before sale open to report readiness

        Returns:
            True once the window is reached

        Raises:
            CountdownCancelledError: An interrupt was observed first
        """
        with self._condition:
            self._ready = False

        self.logger.info(
            "Waiting for sale window",
            sale_open_ms=sale_open_ms,
            lead_ms=lead_ms,
            poll_interval_ms=self.poll_interval_ms
        )

        while True:
            wakeup = self.select(self.poll_interval_ms)

            if wakeup == Wakeup.CANCELLED:
                remaining = sale_open_ms - self.clock.now_ms()
                self._end_progress()
                self.logger.info("Countdown cancelled", remaining_ms=remaining)
                raise CountdownCancelledError("countdown interrupted", remaining_ms=remaining)

            if wakeup == Wakeup.READY:
                self._end_progress()
                self.logger.info("Sale window reached", now_ms=self.clock.now_ms())
                return True

            remaining = sale_open_ms - self.clock.now_ms()
            if remaining <= lead_ms:
                self._notify_ready()
            else:
                self._progress(remaining)

    def _progress(self, remaining_ms: int) -> None:
        if self.show_progress:
            out = self.stream or sys.stdout
            print(f"\r\tCountdown: {format_hms(remaining_ms)}\t", end="", file=out, flush=True)

    def _end_progress(self) -> None:
        if self.show_progress:
            print(file=self.stream or sys.stdout, flush=True)
