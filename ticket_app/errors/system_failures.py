"""
System failure error classifications for unrecoverable errors.

These exceptions represent failures that end the run and need operator
attention: missing preconditions, a corrupted state machine, or bad
configuration.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PreconditionError(SystemFailureError):
    """Identity, catalog or session data could not be resolved."""

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.stage = stage


class StateTransitionError(SystemFailureError):
    """Invalid state transition that corrupts the run state machine."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class ConfigurationError(SystemFailureError):
    """Account configuration is missing or invalid."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
