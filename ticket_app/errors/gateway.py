"""
Failures reported by the sales API gateway.

A gateway failure carries the vendor's return code and message so the
error classifier can decide between retry and abort without parsing
free text.
"""

from typing import Optional, Dict, Any


class GatewayError(Exception):
    """A request to the sales API failed or was rejected."""

    def __init__(self, message: str, code: Optional[str] = None,
                 endpoint: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.endpoint = endpoint
        self.context = context or {}

    @classmethod
    def from_ret(cls, ret: str, endpoint: Optional[str] = None) -> "GatewayError":
        """Build from a vendor ret entry of the form ``CODE::message``."""
        code, sep, message = ret.partition("::")
        if not sep:
            return cls(ret, code=None, endpoint=endpoint)
        return cls(message, code=code.strip(), endpoint=endpoint)

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}::{self.message}"
        return self.message
