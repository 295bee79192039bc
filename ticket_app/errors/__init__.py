"""
Error classification system for the acquisition run.

This module provides the exception hierarchy used to steer the run:
gateway failures, burst-aborting purchase failures, and system-level
failures that end the run.
"""

from .gateway import GatewayError
from .purchase_failures import (
    PurchaseAbortedError,
    SystemBusyError,
    ProductExpiredError,
    CountdownCancelledError,
)
from .system_failures import (
    SystemFailureError,
    PreconditionError,
    StateTransitionError,
    ConfigurationError,
)

__all__ = [
    # Gateway
    "GatewayError",
    # Purchase Failures
    "PurchaseAbortedError",
    "SystemBusyError",
    "ProductExpiredError",
    "CountdownCancelledError",
    # System Failures
    "SystemFailureError",
    "PreconditionError",
    "StateTransitionError",
    "ConfigurationError",
]
