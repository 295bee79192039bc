"""
Purchase burst execution.

A burst is a bounded run of build-then-submit attempts against one fixed
sku. Attempts are paced by the ``AttemptScheduler``; gateway failures are
classified once, right where the gateway call fails, and either retried
or turned into a burst-aborting exception.
"""

from typing import Any, Optional

from ..config.defaults import AccountPolicy
from ..errors import GatewayError, ProductExpiredError, SystemBusyError
from ..gateway.base import ApiGateway
from ..gateway.models import OrderDraft
from ..logging.config import get_purchase_logger, log_attempt
from ..state.models import AttemptOutcome, ErrorKind, SaleTarget
from ..utils.time import SystemClock
from .classifier import ErrorClassifier, default_classifier
from .scheduler import AttemptScheduler

logger = get_purchase_logger(__name__)

VIEWER_INPUT_PREFIX = "dmViewer_"


def bind_viewers(draft: OrderDraft, count: int) -> int:
    """
    Mark the first ``count`` real-name attendees as used on an order draft.

    Orders for real-name events list the account's registered attendees
    under ``data[<dmViewer_*>].fields.viewerList``; the key names are given
    by ``linkage.input``. Drafts without attendee lists are left untouched.

    Returns:
        Number of attendees bound
    """
    payload = draft.payload
    data = payload.get("data") or {}
    inputs = (payload.get("linkage") or {}).get("input") or []

    bound = 0
    for key in inputs:
        if not str(key).startswith(VIEWER_INPUT_PREFIX):
            continue
        viewers = (((data.get(key) or {}).get("fields") or {}).get("viewerList"))
        if not isinstance(viewers, list) or not viewers:
            continue

        if len(viewers) < count:
            logger.warning(
                "Fewer registered attendees than tickets requested",
                registered=len(viewers),
                requested=count
            )
        for viewer in viewers[:count]:
            viewer["isUsed"] = True
        bound = max(bound, min(count, len(viewers)))

    return bound


class PurchaseAttemptLoop:
    """Drives bounded purchase bursts against the gateway."""

    def __init__(
        self,
        gateway: ApiGateway,
        policy: AccountPolicy,
        clock: Optional[Any] = None,
        classifier: Optional[ErrorClassifier] = None,
        scheduler: Optional[AttemptScheduler] = None,
    ) -> None:
        self.gateway = gateway
        self.policy = policy
        self.clock = clock or SystemClock()
        self.classifier = classifier or default_classifier
        self.scheduler = scheduler or AttemptScheduler(
            fixed_short_interval_ms=policy.retry_base_interval_ms,
            cycle_ms=policy.retry_cycle_ms,
        )
        self.logger = logger

    def run(self, target: SaleTarget, burst_size: Optional[int] = None) -> bool:
        """
        Run one burst against ``target``.

        Args:
            target: Item, sku and ticket count to buy
            burst_size: Attempt budget; defaults to the policy's burst size

        Returns:
            True on the first successful submission, False when the budget
            is exhausted

        Raises:
            SystemBusyError: The session is throttled or invalidated
            ProductExpiredError: The target is stale; try inventory polling
        """
        if burst_size is None:
            burst_size = self.policy.retry_burst_size

        self.logger.info(
            "Starting purchase burst",
            item_id=target.item_id,
            sku_id=target.sku_id,
            buy_count=target.buy_count,
            burst_size=burst_size
        )

        cumulative_ms = 0
        min_attempt_ms: Optional[int] = None

        for attempt in range(burst_size):
            started = self.clock.now_ms()
            outcome = self._attempt(target, attempt)
            elapsed = self.clock.now_ms() - started

            if outcome.succeeded:
                log_attempt(self.logger, attempt, outcome.kind.value, elapsed)
                self.logger.info(
                    "Order submitted, complete payment in the app",
                    item_id=target.item_id,
                    sku_id=target.sku_id,
                    attempts=attempt + 1
                )
                return True

            cumulative_ms += elapsed
            min_attempt_ms = elapsed if min_attempt_ms is None else min(min_attempt_ms, elapsed)

            if attempt == burst_size - 1:
                log_attempt(self.logger, attempt, outcome.kind.value, elapsed,
                            reason=outcome.reason)
                break

            wait_ms = self.scheduler.next_interval(attempt, cumulative_ms, min_attempt_ms)
            cumulative_ms += wait_ms
            log_attempt(self.logger, attempt, outcome.kind.value, elapsed,
                        wait_ms=wait_ms, reason=outcome.reason)
            self.clock.sleep_ms(wait_ms)

        self.logger.info(
            "Purchase burst exhausted",
            item_id=target.item_id,
            sku_id=target.sku_id,
            attempts=burst_size
        )
        return False

    def _attempt(self, target: SaleTarget, attempt: int) -> AttemptOutcome:
        """One build-then-submit attempt."""
        try:
            draft = self.gateway.build_order(target.item_id, target.sku_id, target.buy_count)
        except GatewayError as e:
            self._raise_if_fatal(e, attempt, stage="build")
            self.logger.info("Order build failed", attempt=attempt, error=str(e))
            return AttemptOutcome.transient(str(e))

        self.logger.debug("Order built", attempt=attempt)
        self.clock.sleep_ms(self.policy.submit_delay_ms)
        bind_viewers(draft, target.buy_count)

        try:
            receipt = self.gateway.submit_order(draft)
        except GatewayError as e:
            self._raise_if_fatal(e, attempt, stage="submit")
            self.logger.info("Order submission errored", attempt=attempt, error=str(e))
            return AttemptOutcome.transient(str(e))

        if receipt.success:
            return AttemptOutcome.success()

        self.logger.info("Order submission rejected", attempt=attempt, reason=receipt.reason)
        return AttemptOutcome.rejected(receipt.reason)

    def _raise_if_fatal(self, error: GatewayError, attempt: int, stage: str) -> None:
        kind = self.classifier.classify(error)
        context = {"stage": stage, "code": error.code}

        if kind == ErrorKind.SYSTEM_BUSY:
            self.logger.warning("System busy, aborting burst", attempt=attempt, error=str(error))
            raise SystemBusyError(str(error), attempt=attempt, context=context) from error

        if kind == ErrorKind.PRODUCT_EXPIRED:
            self.logger.info("Product expired, aborting burst", attempt=attempt, error=str(error))
            raise ProductExpiredError(str(error), attempt=attempt, context=context) from error
