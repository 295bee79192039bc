"""
Gateway failure classification.

Maps a failure's vendor return code onto the small set of kinds the
engine steers by. The mapping is a closed table: a code that is not
listed is ``OTHER`` and gets retried.
"""

from typing import Iterable, Optional, Union

from ..errors import GatewayError
from ..state.models import ErrorKind

# Rate limiting, anti-bot rejection, or an invalidated session
SYSTEM_BUSY_CODES = frozenset({
    "RGV587_ERROR",
    "FAIL_SYS_USER_VALIDATE",
    "FAIL_SYS_SESSION_EXPIRED",
    "FAIL_SYS_TOKEN_EXOIRED",
    "FAIL_SYS_TOKEN_EXPIRED",
})

# Listing changed or sold out since the order target was resolved
PRODUCT_EXPIRED_CODES = frozenset({
    "B-00203-200-034",
    "B-00203-200-008",
})

SESSION_EXPIRED_CODE = "FAIL_SYS_SESSION_EXPIRED"


def _code_of(failure: Union[GatewayError, str, None]) -> Optional[str]:
    if failure is None:
        return None
    if isinstance(failure, GatewayError):
        return failure.code
    code, sep, _ = str(failure).partition("::")
    return code.strip() if sep else None


class ErrorClassifier:
    """Pure classifier from failure payload to ``ErrorKind``."""

    def __init__(
        self,
        system_busy_codes: Iterable[str] = SYSTEM_BUSY_CODES,
        product_expired_codes: Iterable[str] = PRODUCT_EXPIRED_CODES,
    ):
        self.system_busy_codes = frozenset(system_busy_codes)
        self.product_expired_codes = frozenset(product_expired_codes)

    def classify(self, failure: Union[GatewayError, str, None]) -> ErrorKind:
        """
        Classify a failure.

        Args:
            failure: A ``GatewayError`` or a raw ``CODE::message`` ret entry

        Returns:
            Exactly one ``ErrorKind``; unrecognized payloads are ``OTHER``
        """
        code = _code_of(failure)
        if code in self.system_busy_codes:
            return ErrorKind.SYSTEM_BUSY
        if code in self.product_expired_codes:
            return ErrorKind.PRODUCT_EXPIRED
        return ErrorKind.OTHER


def is_session_expired(failure: Union[GatewayError, str, None]) -> bool:
    """True when the failure says the login session has expired."""
    return _code_of(failure) == SESSION_EXPIRED_CODE


default_classifier = ErrorClassifier()


def classify_error(failure: Union[GatewayError, str, None]) -> ErrorKind:
    """Classify with the default code tables."""
    return default_classifier.classify(failure)
