"""
Session recovery strategies.

Invoked when the run ends on a throttled or invalidated session.
"""
from .reauth import (
    NoopReauthenticator,
    Reauthenticator,
    SubprocessReauthenticator,
    create_reauthenticator,
)

__all__ = [
    "NoopReauthenticator",
    "Reauthenticator",
    "SubprocessReauthenticator",
    "create_reauthenticator",
]
