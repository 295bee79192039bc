"""
Main acquisition engine coordinator.

Orchestrates one acquisition run: resolves identity, catalog and session,
decides between counting down and buying immediately, runs purchase
bursts, and escalates to inventory polling when the target sells out.
"""

import sys
from typing import Any, NoReturn, Optional, TextIO

from .config.defaults import AccountConfig
from .errors import (
    CountdownCancelledError,
    GatewayError,
    PreconditionError,
    ProductExpiredError,
    SystemBusyError,
)
from .gateway.base import ApiGateway
from .gateway.models import Catalog, Identity, PerformRef, Tier
from .logging.config import get_logger
from .purchase.attempt_loop import PurchaseAttemptLoop
from .purchase.classifier import ErrorClassifier, is_session_expired
from .purchase.countdown import SaleCountdown
from .purchase.leaks import InventoryPoller
from .recovery.reauth import Reauthenticator, create_reauthenticator
from .state.models import ErrorKind, RunPhase, RunState, SaleTarget
from .state.transitions import apply_transition
from .utils.time import SystemClock, format_epoch_ms

logger = get_logger(__name__)


class TicketAcquisitionEngine:
    """
    Main coordinator for one account's acquisition run.

    Manages the run pipeline:
    Identity → Catalog → Session → (Countdown | Buy now) → Burst → (Done | Leaks)
    """

    def __init__(
        self,
        account: AccountConfig,
        gateway: ApiGateway,
        clock: Optional[Any] = None,
        reauthenticator: Optional[Reauthenticator] = None,
        classifier: Optional[ErrorClassifier] = None,
        stream: Optional[TextIO] = None,
        show_progress: bool = True,
    ) -> None:
        """Initialize the engine and its phase components."""
        self.logger = logger.bind(login_id=account.login_id)
        self.account = account
        self.policy = account.policy
        self.gateway = gateway
        self.clock = clock or SystemClock()
        self.stream = stream

        self.attempt_loop = PurchaseAttemptLoop(
            gateway, self.policy, clock=self.clock, classifier=classifier
        )
        self.countdown = SaleCountdown(
            self.policy.poll_interval_ms,
            clock=self.clock,
            stream=stream,
            show_progress=show_progress,
        )
        self.poller = InventoryPoller(
            gateway,
            self.policy,
            self.attempt_loop,
            default_buy_count=account.ticket.buy_count,
            clock=self.clock,
        )
        self.reauthenticator = reauthenticator or create_reauthenticator(account.reauth)

        self.state = RunState(phase=RunPhase.INIT)

    def cancel(self) -> None:
        """Request cancellation; honoured while counting down in the current run."""
        self.countdown.cancel()

    def run(self) -> RunState:
        """
        Execute one acquisition run.

        Returns:
            Final run state (DONE or TERMINAL)

        Raises:
            PreconditionError: Catalog or session details could not be resolved
        """
        self.countdown.reset()
        state = RunState(phase=RunPhase.INIT)
        ticket = self.account.ticket

        state = self._transition(state, RunPhase.RESOLVING_IDENTITY, "run_started")
        try:
            identity = self.gateway.fetch_identity()
        except GatewayError as e:
            if is_session_expired(e):
                self.logger.error("Session expired, log in again", error=str(e))
            else:
                self.logger.error("Failed to fetch user identity", error=str(e))
            return self._transition(state, RunPhase.TERMINAL, "identity_failed",
                                    {"error": str(e)})

        state = self._transition(state, RunPhase.RESOLVING_CATALOG, "identity_resolved",
                                 {"nickname": identity.nickname})
        try:
            catalog = self.gateway.fetch_catalog(ticket.ticket_id)
        except GatewayError as e:
            self._fail_precondition(state, "catalog", f"Failed to fetch ticket details: {e}")

        session = catalog.session_at(ticket.session_index)
        if session is None:
            self._fail_precondition(
                state, "catalog",
                f"Session index {ticket.session_index} out of range "
                f"({len(catalog.sessions)} sessions)"
            )

        state = self._transition(state, RunPhase.RESOLVING_SESSION, "catalog_resolved",
                                 {"ticket_name": catalog.name})
        try:
            listing = self.gateway.fetch_session_tiers(ticket.ticket_id, session.perform_id)
        except GatewayError as e:
            self._fail_precondition(state, "session", f"Failed to fetch session tiers: {e}")

        tier = listing.tier_at(ticket.grade_index)
        if tier is None:
            self._fail_precondition(
                state, "session",
                f"Grade index {ticket.grade_index} out of range ({len(listing.tiers)} tiers)"
            )

        sale_open_ms = catalog.sell_start_ms
        if self.policy.sale_open_override_ms > 0:
            sale_open_ms = self.policy.sale_open_override_ms

        target = SaleTarget(item_id=tier.item_id, sku_id=tier.sku_id, buy_count=ticket.buy_count)
        state = self._transition(
            state, RunPhase.DECIDING, "session_resolved",
            {"sale_open_ms": sale_open_ms, "sku_id": tier.sku_id},
            target=target, sale_open_ms=sale_open_ms, perform_id=session.perform_id
        )
        self._print_summary(identity, catalog, session, tier, sale_open_ms)

        if self.clock.now_ms() > sale_open_ms:
            state = self._transition(state, RunPhase.BUYING_NOW, "sale_already_open")
            return self._buy_now(state)

        state = self._transition(state, RunPhase.COUNTING_DOWN, "sale_not_open")
        return self._count_down(state)

    def _buy_now(self, state: RunState) -> RunState:
        state = self._transition(state, RunPhase.ATTEMPTING, "buy_now")
        success, kind = self._run_burst(state)
        if success:
            return self._transition(state, RunPhase.DONE, "burst_succeeded", success=True)
        return self._after_failed_burst(state, kind)

    def _count_down(self, state: RunState) -> RunState:
        windows = [state.sale_open_ms]
        if self.policy.priority_purchase_lead_ms > 0:
            windows.append(state.sale_open_ms + self.policy.priority_purchase_lead_ms)

        kind: Optional[ErrorKind] = None
        for idx, window_ms in enumerate(windows):
            if idx > 0:
                self.logger.info("Priority sale over, waiting for general sale",
                                 sale_open_ms=window_ms)
                state = self._transition(state, RunPhase.COUNTING_DOWN, "priority_window",
                                         {"sale_open_ms": window_ms}, sale_open_ms=window_ms)
            try:
                self.countdown.await_sale_window(window_ms, self.policy.early_submit_lead_ms)
            except CountdownCancelledError as e:
                return self._transition(state, RunPhase.TERMINAL, "cancelled",
                                        {"remaining_ms": e.remaining_ms})

            state = self._transition(state, RunPhase.ATTEMPTING, "sale_window_reached")
            success, kind = self._run_burst(state)
            if success:
                return self._transition(state, RunPhase.DONE, "burst_succeeded", success=True)
            if kind == ErrorKind.SYSTEM_BUSY:
                break

        return self._after_failed_burst(state, kind)

    def _run_burst(self, state: RunState) -> tuple[bool, Optional[ErrorKind]]:
        """Run one burst; abort kinds are returned rather than raised."""
        try:
            return self.attempt_loop.run(state.target), None
        except SystemBusyError:
            return False, ErrorKind.SYSTEM_BUSY
        except ProductExpiredError:
            return False, ErrorKind.PRODUCT_EXPIRED

    def _after_failed_burst(self, state: RunState, kind: Optional[ErrorKind]) -> RunState:
        if kind == ErrorKind.SYSTEM_BUSY:
            return self._system_busy(state)

        if kind == ErrorKind.PRODUCT_EXPIRED:
            since_open = self.clock.now_ms() - state.sale_open_ms
            grace_ms = self.policy.leaks.grace_period_ms
            if since_open > grace_ms:
                return self._transition(
                    state, RunPhase.TERMINAL, "product_expired_past_grace",
                    {"since_open_ms": since_open, "grace_period_ms": grace_ms},
                    last_error=kind
                )
            self.logger.info("Sold out, polling for returned stock")
            return self._poll_leaks(state)

        self.logger.info("Tickets not acquired")
        return self._transition(state, RunPhase.TERMINAL, "burst_exhausted")

    def _poll_leaks(self, state: RunState) -> RunState:
        state = self._transition(state, RunPhase.ESCALATING_TO_LEAKS, "product_expired",
                                 last_error=ErrorKind.PRODUCT_EXPIRED)
        state = self._transition(state, RunPhase.POLLING_LEAKS, "polling_started")

        try:
            success = self.poller.poll_for_stock(self.account.ticket.ticket_id, state.perform_id)
        except SystemBusyError:
            return self._system_busy(state)

        if success:
            return self._transition(state, RunPhase.DONE, "leaks_succeeded", success=True)

        self.logger.info("Tickets not acquired")
        return self._transition(state, RunPhase.TERMINAL, "leaks_exhausted")

    def _system_busy(self, state: RunState) -> RunState:
        self.logger.error("Session throttled or invalidated, re-authenticating")
        recovered = self.reauthenticator.reauthenticate(self.account.login_id)
        return self._transition(state, RunPhase.TERMINAL, "system_busy",
                                {"reauthenticated": recovered},
                                last_error=ErrorKind.SYSTEM_BUSY)

    def _fail_precondition(self, state: RunState, stage: str, message: str) -> NoReturn:
        self.logger.error("Run precondition failed", stage=stage, error=message)
        self._transition(state, RunPhase.TERMINAL, f"{stage}_failed", {"error": message})
        raise PreconditionError(message, stage=stage,
                                context={"login_id": self.account.login_id})

    def _transition(self, state: RunState, phase: RunPhase, trigger: str,
                    context: Optional[dict] = None, **changes) -> RunState:
        self.state = apply_transition(
            state, phase, run_id=self.account.login_id, trigger=trigger,
            context=context, **changes
        )
        return self.state

    def _print_summary(self, identity: Identity, catalog: Catalog, session: PerformRef,
                       tier: Tier, sale_open_ms: int) -> None:
        sale_text = catalog.sell_start_text or format_epoch_ms(sale_open_ms)
        self.logger.info(
            "Run summary",
            nickname=identity.nickname,
            ticket_name=catalog.name,
            session_name=session.name,
            price_name=tier.price_name,
            sale_open=sale_text
        )
        lines = [
            f"\tAccount:  {self.account.remark or self.account.login_id}",
            f"\tNickname: {identity.nickname}",
            f"\tTicket:   {catalog.name}",
            f"\tSession:  {session.name}",
            f"\tTier:     {tier.price_name}",
            f"\tOn sale:  {sale_text}",
        ]
        print("\n" + "\n".join(lines) + "\n", file=self.stream or sys.stdout, flush=True)
