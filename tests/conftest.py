"""Pytest configuration and shared fixtures."""

import io

import pytest
from typing import Any, Callable, Optional

from ticket_app.config.defaults import (
    AccountConfig,
    AccountPolicy,
    LeaksConfig,
    ReauthConfig,
    TicketSelection,
)
from ticket_app.engine import TicketAcquisitionEngine
from ticket_app.gateway.base import ApiGateway
from ticket_app.gateway.models import (
    Catalog,
    Identity,
    OrderDraft,
    PerformRef,
    SessionTiers,
    SubmitReceipt,
    Tier,
)
from ticket_app.recovery.reauth import Reauthenticator

START_MS = 1_700_000_000_000


class FakeClock:
    """Virtual clock: sleeps and waits advance time instead of blocking."""

    def __init__(self, start_ms: int = START_MS):
        self._now = start_ms
        self.sleeps: list[int] = []
        self.waits: list[int] = []
        self._timers: list[tuple[int, Callable[[], None]]] = []

    def now_ms(self) -> int:
        return self._now

    def call_at(self, at_ms: int, callback: Callable[[], None]) -> None:
        """Run ``callback`` once virtual time reaches ``at_ms``."""
        self._timers.append((at_ms, callback))
        self._timers.sort(key=lambda t: t[0])

    def advance(self, ms: int) -> None:
        target = self._now + max(ms, 0)
        while self._timers and self._timers[0][0] <= target:
            at_ms, callback = self._timers.pop(0)
            self._now = max(self._now, at_ms)
            callback()
        self._now = target

    def sleep_ms(self, ms: int) -> None:
        self.sleeps.append(ms)
        self.advance(ms)

    def wait(self, condition, timeout_ms: Optional[int]) -> bool:
        self.waits.append(timeout_ms)
        self.advance(timeout_ms or 0)
        return False


def _next(queue: list) -> Any:
    """Pop the next scripted response, repeating the last one forever."""
    item = queue.pop(0) if len(queue) > 1 else queue[0]
    if isinstance(item, Exception):
        raise item
    return item


class ScriptedGateway(ApiGateway):
    """Gateway double replaying scripted responses and recording calls."""

    def __init__(
        self,
        clock: FakeClock,
        identity: Any = None,
        catalog: Any = None,
        tiers: Optional[list] = None,
        builds: Optional[list] = None,
        submits: Optional[list] = None,
        call_cost_ms: int = 50,
    ):
        self.clock = clock
        self.identity = [identity or Identity(nickname="tester", user_id="u1")]
        self.catalog = [catalog]
        self.tiers = tiers or [SessionTiers(perform_id="P1")]
        self.builds = builds or [None]
        self.submits = submits or [SubmitReceipt(success=False, ret=("F-10000::sold out",))]
        self.call_cost_ms = call_cost_ms
        self.calls: list[tuple] = []
        self.build_times: list[int] = []

    def _call(self, name: str, *args) -> None:
        self.calls.append((name,) + args)
        self.clock.advance(self.call_cost_ms)

    def calls_to(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    def fetch_identity(self) -> Identity:
        self._call("fetch_identity")
        return _next(self.identity)

    def fetch_catalog(self, ticket_id: str) -> Catalog:
        self._call("fetch_catalog", ticket_id)
        return _next(self.catalog)

    def fetch_session_tiers(self, ticket_id: str, perform_id: str) -> SessionTiers:
        self._call("fetch_session_tiers", ticket_id, perform_id)
        return _next(self.tiers)

    def build_order(self, item_id: str, sku_id: str, count: int) -> OrderDraft:
        self.build_times.append(self.clock.now_ms())
        self._call("build_order", item_id, sku_id, count)
        result = _next(self.builds)
        if result is None:
            return OrderDraft(item_id=item_id, sku_id=sku_id, buy_count=count)
        return result

    def submit_order(self, draft: OrderDraft) -> SubmitReceipt:
        self._call("submit_order", draft.item_id, draft.sku_id)
        return _next(self.submits)


class RecordingReauthenticator(Reauthenticator):
    """Records login ids instead of spawning a helper process."""

    def __init__(self, result: bool = True):
        self.result = result
        self.login_ids: list[str] = []

    def reauthenticate(self, login_id: str) -> bool:
        self.login_ids.append(login_id)
        return self.result


def make_tiers(*salable: bool, perform_id: str = "P1") -> SessionTiers:
    """Tier listing where tier N has item ``I<N>`` and sku ``S<N>``."""
    return SessionTiers(
        perform_id=perform_id,
        tiers=tuple(
            Tier(item_id=f"I{i}", sku_id=f"S{i}", price_name=f"Tier {i}", salable=s)
            for i, s in enumerate(salable, start=1)
        ),
    )


@pytest.fixture
def clock() -> FakeClock:
    """Virtual clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def tiers_factory() -> Callable[..., SessionTiers]:
    return make_tiers


@pytest.fixture
def catalog_factory(clock: FakeClock) -> Callable[[int], Catalog]:
    """Catalog whose sale opens ``offset_ms`` from the clock's start."""
    def _make(offset_ms: int) -> Catalog:
        return Catalog(
            ticket_id="T1",
            name="Summer Tour",
            sell_start_ms=clock.now_ms() + offset_ms,
            sessions=(PerformRef("P1", "Night 1"), PerformRef("P2", "Night 2")),
        )
    return _make


@pytest.fixture
def gateway_factory(clock: FakeClock) -> Callable[..., ScriptedGateway]:
    def _make(**kwargs) -> ScriptedGateway:
        return ScriptedGateway(clock, **kwargs)
    return _make


@pytest.fixture
def reauthenticator() -> RecordingReauthenticator:
    return RecordingReauthenticator()


@pytest.fixture
def account_factory() -> Callable[..., AccountConfig]:
    """Account with test-friendly defaults; keyword args override policy fields."""
    def _make(leaks: Optional[dict] = None, ticket: Optional[dict] = None,
              **policy: Any) -> AccountConfig:
        ticket_fields = {"ticket_id": "T1", "buy_count": 2, "session_index": 1, "grade_index": 1}
        ticket_fields.update(ticket or {})
        leaks_fields = {"attempts": 5, "interval_ms": 1000}
        leaks_fields.update(leaks or {})
        if "eligible_grades" in leaks_fields:
            leaks_fields["eligible_grades"] = frozenset(leaks_fields["eligible_grades"])
        policy_fields = {"retry_burst_size": 4, "poll_interval_ms": 100}
        policy_fields.update(policy)
        return AccountConfig(
            login_id="13800000000",
            remark="test account",
            ticket=TicketSelection(**ticket_fields),
            policy=AccountPolicy(leaks=LeaksConfig(**leaks_fields), **policy_fields),
            reauth=ReauthConfig(),
        )
    return _make


@pytest.fixture
def engine_factory(clock: FakeClock, reauthenticator: RecordingReauthenticator):
    """Engine wired to the virtual clock with progress output silenced."""
    def _make(account: AccountConfig, gateway: ScriptedGateway) -> TicketAcquisitionEngine:
        return TicketAcquisitionEngine(
            account,
            gateway,
            clock=clock,
            reauthenticator=reauthenticator,
            stream=io.StringIO(),
            show_progress=False,
        )
    return _make
