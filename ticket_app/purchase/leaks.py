"""
Inventory polling after a sold-out burst.

Returned or released tickets show up as a tier flipping back to salable.
The poller re-reads the session's tier listing on an interval and fires
a fresh burst at the first salable tier the account is willing to take.
"""

from typing import Any, Optional

from ..config.defaults import AccountPolicy
from ..errors import GatewayError, ProductExpiredError
from ..gateway.base import ApiGateway
from ..gateway.models import SessionTiers, Tier
from ..logging.config import get_purchase_logger
from ..state.models import SaleTarget
from ..utils.time import SystemClock
from .attempt_loop import PurchaseAttemptLoop

logger = get_purchase_logger(__name__)


class InventoryPoller:
    """Polls tier stock and buys the first eligible salable tier."""

    def __init__(
        self,
        gateway: ApiGateway,
        policy: AccountPolicy,
        attempt_loop: PurchaseAttemptLoop,
        default_buy_count: int,
        clock: Optional[Any] = None,
    ) -> None:
        self.gateway = gateway
        self.policy = policy
        self.leaks = policy.leaks
        self.attempt_loop = attempt_loop
        self.default_buy_count = default_buy_count
        self.clock = clock or SystemClock()
        self.logger = logger

    @property
    def buy_count(self) -> int:
        return self.leaks.override_buy_count or self.default_buy_count

    def select_tier(self, listing: SessionTiers) -> Optional[tuple[int, Tier]]:
        """
        First tier in listing order that is salable and eligible.

        Returns:
            (1-based grade index, tier), or None when nothing qualifies
        """
        grades = self.leaks.eligible_grades
        for idx, tier in enumerate(listing.tiers, start=1):
            if tier.salable and (not grades or idx in grades):
                return idx, tier
        return None

    def poll_for_stock(self, ticket_id: str, perform_id: str) -> bool:
        """
        Poll for returned stock, bursting at the first eligible tier.

        Returns:
            True when a nested burst succeeds, False once all poll cycles
            are used up

        Raises:
            SystemBusyError: A nested burst found the session throttled
        """
        interval_ms = self.leaks.effective_interval_ms

        self.logger.info(
            "Polling for returned stock",
            ticket_id=ticket_id,
            perform_id=perform_id,
            attempts=self.leaks.attempts,
            interval_ms=interval_ms,
            eligible_grades=sorted(self.leaks.eligible_grades)
        )

        for cycle in range(self.leaks.attempts):
            try:
                listing = self.gateway.fetch_session_tiers(ticket_id, perform_id)
            except GatewayError as e:
                self.logger.info("Stock query failed", cycle=cycle + 1, error=str(e))
                listing = None

            match = self.select_tier(listing) if listing is not None else None

            if match is None:
                self.logger.debug("No stock", cycle=cycle + 1)
            else:
                grade, tier = match
                self.logger.info(
                    "Stock found, bursting",
                    cycle=cycle + 1,
                    grade=grade,
                    price_name=tier.price_name
                )
                target = SaleTarget(item_id=tier.item_id, sku_id=tier.sku_id,
                                    buy_count=self.buy_count)
                try:
                    if self.attempt_loop.run(target):
                        return True
                except ProductExpiredError as e:
                    self.logger.info("Tier sold out again", grade=grade, error=str(e))

            self.clock.sleep_ms(interval_ms)

        self.logger.info("Stock polling exhausted", attempts=self.leaks.attempts)
        return False
