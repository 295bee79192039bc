"""
Sales API gateway boundary.

Typed payloads returned by the gateway, the abstract gateway contract,
and helpers for turning raw vendor envelopes into results or failures.
Concrete gateways decode every response with ``parse_envelope`` and call
``Envelope.raise_for_ret`` so failures reach the engine as classifiable
``GatewayError`` values.
"""
from .base import ApiGateway
from .envelope import Envelope, parse_envelope, receipt_from_envelope
from .models import (
    Catalog,
    Identity,
    OrderDraft,
    PerformRef,
    SessionTiers,
    SubmitReceipt,
    Tier,
)

__all__ = [
    "ApiGateway",
    # Envelope helpers
    "Envelope",
    "parse_envelope",
    "receipt_from_envelope",
    # Payloads
    "Catalog",
    "Identity",
    "OrderDraft",
    "PerformRef",
    "SessionTiers",
    "SubmitReceipt",
    "Tier",
]
