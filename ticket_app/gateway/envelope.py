"""
Response envelope parsing for the sales API.

Every vendor response wraps its payload as ``{"ret": [...], "data": ...}``.
A ``SUCCESS::`` entry in ``ret`` marks success; otherwise the first entry
carries ``CODE::message``, which becomes a classifiable ``GatewayError``.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import orjson

from ..errors import GatewayError
from .models import SubmitReceipt

SUCCESS_PREFIX = "SUCCESS::"
MALFORMED_CODE = "MALFORMED_RESPONSE"


@dataclass(frozen=True)
class Envelope:
    """Decoded vendor response."""
    ret: tuple[str, ...]
    data: Any = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return any(r.startswith(SUCCESS_PREFIX) for r in self.ret)

    @property
    def first_ret(self) -> str:
        return self.ret[0] if self.ret else ""

    def raise_for_ret(self, endpoint: Optional[str] = None) -> None:
        """Raise ``GatewayError`` unless the envelope reports success."""
        if not self.ok:
            raise GatewayError.from_ret(self.first_ret or "EMPTY_RET::no ret entries",
                                        endpoint=endpoint)

    def nested_result(self, key: str = "result") -> Any:
        """
        Decode a JSON document embedded as a string under ``data[key]``.

        Raises:
            GatewayError: If the field is missing or not valid JSON
        """
        if not isinstance(self.data, dict) or key not in self.data:
            raise GatewayError(f"Missing '{key}' in response data", code=MALFORMED_CODE)

        raw = self.data[key]
        if not isinstance(raw, (str, bytes)):
            return raw

        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise GatewayError(f"Invalid embedded JSON in '{key}': {e}", code=MALFORMED_CODE)


def parse_envelope(raw: Union[str, bytes]) -> Envelope:
    """
    Parse a raw response body into an ``Envelope``.

    Args:
        raw: Response body as returned by the transport

    Returns:
        Decoded envelope

    Raises:
        GatewayError: If the body is not a JSON object with a ``ret`` list
    """
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise GatewayError(f"Invalid JSON: {e}", code=MALFORMED_CODE)

    if not isinstance(payload, dict):
        raise GatewayError("Response is not a JSON object", code=MALFORMED_CODE)

    ret = payload.get("ret")
    if not isinstance(ret, list):
        raise GatewayError("Response has no 'ret' list", code=MALFORMED_CODE)

    return Envelope(ret=tuple(str(r) for r in ret), data=payload.get("data") or {})


def receipt_from_envelope(envelope: Envelope) -> SubmitReceipt:
    """Convert an order-create envelope into a submit receipt."""
    return SubmitReceipt(success=envelope.ok, ret=envelope.ret)
