"""
Burst pacing.

The sales API admits requests in cycles of roughly 5.5 seconds. Even
attempts are followed by a short fixed probe; odd attempts wait until
the next cycle boundary, minus the fastest attempt seen so the request
lands as the cycle opens.
"""

import math

DEFAULT_SHORT_INTERVAL_MS = 100
DEFAULT_CYCLE_MS = 5500


class AttemptScheduler:
    """Computes the wait before the next attempt of a burst."""

    def __init__(self, fixed_short_interval_ms: int = DEFAULT_SHORT_INTERVAL_MS,
                 cycle_ms: int = DEFAULT_CYCLE_MS):
        self.fixed_short_interval_ms = fixed_short_interval_ms
        self.cycle_ms = cycle_ms

    def next_interval(self, attempt_index: int, cumulative_elapsed_ms: int,
                      min_observed_attempt_ms: int) -> int:
        """
        Wait in milliseconds after attempt ``attempt_index``.

        Args:
            attempt_index: Zero-based index of the attempt just finished
            cumulative_elapsed_ms: Duration of all attempts and waits so far,
                including the attempt just finished
            min_observed_attempt_ms: Fastest attempt duration in this burst

        Returns:
            Non-negative wait; a boundary already passed yields zero
        """
        if attempt_index % 2 == 0:
            return self.fixed_short_interval_ms

        boundary = math.ceil((attempt_index + 1) / 2) * self.cycle_ms
        return max(boundary - cumulative_elapsed_ms - min_observed_attempt_ms, 0)
