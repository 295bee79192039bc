"""Abstract contract for the sales API gateway."""

from abc import ABC, abstractmethod

from .models import Catalog, Identity, OrderDraft, SessionTiers, SubmitReceipt


class ApiGateway(ABC):
    """
    Performs signed requests against the sales API.

    Every method either returns a typed payload or raises
    ``ticket_app.errors.GatewayError`` carrying the vendor return code.
    ``submit_order`` is the exception: a remote rejection of a well-formed
    submission is reported through ``SubmitReceipt.success`` instead.
    """

    @abstractmethod
    def fetch_identity(self) -> Identity:
        """Fetch the user behind the current session."""

    @abstractmethod
    def fetch_catalog(self, ticket_id: str) -> Catalog:
        """Fetch event details, including sale-open time and sessions."""

    @abstractmethod
    def fetch_session_tiers(self, ticket_id: str, perform_id: str) -> SessionTiers:
        """Fetch the tier listing of one session."""

    @abstractmethod
    def build_order(self, item_id: str, sku_id: str, count: int) -> OrderDraft:
        """Build an order draft for ``count`` tickets of a sku."""

    @abstractmethod
    def submit_order(self, draft: OrderDraft) -> SubmitReceipt:
        """Submit a previously built order draft."""
