"""
Purchase failure classifications raised out of a burst.

These exceptions end the current burst. Whether the run can continue
depends on the kind: an expired product may be recovered through
inventory polling, a busy system cannot.
"""

from typing import Optional, Dict, Any


class PurchaseAbortedError(Exception):
    """Base class for failures that stop a purchase burst early."""

    def __init__(self, message: str, attempt: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.attempt = attempt
        self.context = context or {}
        self.recoverable = False


class SystemBusyError(PurchaseAbortedError):
    """Account or session is rate-limited or invalidated. Fatal to the run."""


class ProductExpiredError(PurchaseAbortedError):
    """The resolved sale target is stale; inventory polling may recover it."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.recoverable = True


class CountdownCancelledError(Exception):
    """The countdown observed an external interrupt."""

    def __init__(self, message: str = "countdown cancelled",
                 remaining_ms: Optional[int] = None):
        super().__init__(message)
        self.remaining_ms = remaining_ms
        self.recoverable = False
