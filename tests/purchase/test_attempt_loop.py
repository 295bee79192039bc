"""Tests for purchase burst execution."""

import pytest

from ticket_app.errors import GatewayError, ProductExpiredError, SystemBusyError
from ticket_app.gateway.models import OrderDraft, SubmitReceipt
from ticket_app.purchase.attempt_loop import PurchaseAttemptLoop, bind_viewers
from ticket_app.state.models import SaleTarget

TARGET = SaleTarget(item_id="I1", sku_id="S1", buy_count=2)
OK = SubmitReceipt(success=True, ret=("SUCCESS::ok",))
REJECTED = SubmitReceipt(success=False, ret=("F-10000::sold out",))


@pytest.fixture
def make_loop(clock, gateway_factory, account_factory):
    def _make(policy_overrides=None, **gateway_kwargs):
        gateway = gateway_factory(**gateway_kwargs)
        policy = account_factory(**(policy_overrides or {})).policy
        return PurchaseAttemptLoop(gateway, policy, clock=clock), gateway
    return _make


class TestBurstSuccess:
    """Test bursts that end in a submitted order."""

    def test_first_attempt_success(self, make_loop):
        """Test a burst that succeeds on the first attempt."""
        loop, gateway = make_loop(submits=[OK])

        assert loop.run(TARGET, burst_size=4) is True
        assert len(gateway.calls_to("build_order")) == 1
        assert len(gateway.calls_to("submit_order")) == 1

    def test_stops_at_first_success(self, make_loop):
        """Test that no attempt runs after a success."""
        loop, gateway = make_loop(submits=[REJECTED, REJECTED, OK, OK])

        assert loop.run(TARGET, burst_size=6) is True
        assert len(gateway.calls_to("submit_order")) == 3
        assert len(gateway.calls_to("build_order")) == 3

    def test_build_arguments(self, make_loop):
        """Test that the target is passed to the order build."""
        loop, gateway = make_loop(submits=[OK])
        loop.run(TARGET, burst_size=1)
        assert gateway.calls_to("build_order")[0] == ("build_order", "I1", "S1", 2)


class TestBurstExhaustion:
    """Test bursts that use up their attempt budget."""

    def test_all_build_failures_other(self, make_loop):
        """Test that unclassified build failures are retried."""
        loop, gateway = make_loop(builds=[GatewayError.from_ret("F-10000::try again")])

        assert loop.run(TARGET, burst_size=4) is False
        assert len(gateway.calls_to("build_order")) == 4
        assert gateway.calls_to("submit_order") == []

    def test_all_submissions_rejected(self, make_loop):
        """Test a burst where every submission is rejected."""
        loop, gateway = make_loop(submits=[REJECTED])

        assert loop.run(TARGET, burst_size=4) is False
        assert len(gateway.calls_to("submit_order")) == 4

    def test_submit_transport_error_is_retried(self, make_loop):
        """Test that a transport error on submit is retried."""
        loop, gateway = make_loop(submits=[GatewayError("connection reset"), OK])

        assert loop.run(TARGET, burst_size=3) is True
        assert len(gateway.calls_to("submit_order")) == 2

    def test_default_burst_size_from_policy(self, make_loop):
        """Test that the burst size defaults to the policy value."""
        loop, gateway = make_loop(policy_overrides={"retry_burst_size": 3}, submits=[REJECTED])

        assert loop.run(TARGET) is False
        assert len(gateway.calls_to("build_order")) == 3


class TestBurstAbort:
    """Test failures that abort a burst early."""

    def test_product_expired_stops_burst(self, make_loop):
        """Test that an expired product aborts with the attempt index."""
        expired = GatewayError.from_ret("B-00203-200-034::product information expired")
        loop, gateway = make_loop(builds=[None, expired], submits=[REJECTED])

        with pytest.raises(ProductExpiredError) as exc_info:
            loop.run(TARGET, burst_size=4)

        assert exc_info.value.attempt == 1
        assert exc_info.value.recoverable is True
        assert len(gateway.calls_to("build_order")) == 2

    def test_system_busy_on_build(self, make_loop):
        """Test a busy system reported by the order build."""
        busy = GatewayError.from_ret("RGV587_ERROR::SM::busy")
        loop, gateway = make_loop(builds=[busy])

        with pytest.raises(SystemBusyError) as exc_info:
            loop.run(TARGET, burst_size=4)

        assert exc_info.value.recoverable is False
        assert exc_info.value.context["stage"] == "build"
        assert len(gateway.calls_to("build_order")) == 1

    def test_system_busy_on_submit(self, make_loop):
        """Test a busy system reported by the order submission."""
        busy = GatewayError.from_ret("FAIL_SYS_USER_VALIDATE::validate")
        loop, gateway = make_loop(submits=[busy])

        with pytest.raises(SystemBusyError):
            loop.run(TARGET, burst_size=4)


class TestBurstPacing:
    """Test waits between attempts."""

    def test_interval_sequence(self, clock, make_loop):
        """Test the alternating short and cycle-aligned waits."""
        # Each attempt costs 100ms: build and submit at 50ms each
        loop, gateway = make_loop(submits=[REJECTED])

        loop.run(TARGET, burst_size=4)

        waits = [s for s in clock.sleeps if s]
        # attempt 0: short probe; attempt 1: 5500 - (100+100+100) - 100; attempt 2: probe
        assert waits == [100, 5100, 100]

    def test_no_wait_after_last_attempt(self, clock, make_loop):
        """Test that an exhausted burst returns without waiting."""
        loop, gateway = make_loop(submits=[REJECTED])

        loop.run(TARGET, burst_size=1)

        assert [s for s in clock.sleeps if s] == []

    def test_submit_delay_applied(self, clock, make_loop):
        """Test the pause between build and submit."""
        loop, gateway = make_loop(policy_overrides={"submit_delay_ms": 30}, submits=[OK])

        loop.run(TARGET, burst_size=1)

        assert clock.sleeps == [30]


class TestBindViewers:
    """Test attendee binding on order drafts."""

    def _draft(self, viewers):
        return OrderDraft(
            item_id="I1",
            sku_id="S1",
            buy_count=2,
            payload={
                "linkage": {"input": ["dmViewer_abc", "dmContactName_1"]},
                "data": {
                    "dmViewer_abc": {"fields": {"viewerList": viewers}},
                    "dmContactName_1": {"fields": {"value": "x"}},
                },
            },
        )

    def test_binds_first_n(self):
        """Test that only the first attendees are marked used."""
        viewers = [{"id": 1}, {"id": 2}, {"id": 3}]
        draft = self._draft(viewers)

        assert bind_viewers(draft, 2) == 2
        assert [v.get("isUsed", False) for v in viewers] == [True, True, False]

    def test_fewer_viewers_than_tickets(self):
        """Test binding when fewer attendees are registered than requested."""
        viewers = [{"id": 1}]
        assert bind_viewers(self._draft(viewers), 2) == 1
        assert viewers[0]["isUsed"] is True

    def test_draft_without_viewers_untouched(self):
        """Test that drafts without attendee lists are left alone."""
        draft = OrderDraft(item_id="I1", sku_id="S1", buy_count=2, payload={"data": {}})
        assert bind_viewers(draft, 2) == 0
        assert draft.payload == {"data": {}}
