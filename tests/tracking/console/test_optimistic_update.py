"""Tests for optimistic status updates — speculative apply, commit and rollback."""

import asyncio

import httpx
import pytest
from tracking.console.backend.fake_adapter import FakeOrderBackend
from tracking.console.backend.http_adapter import HttpOrderBackend
from tracking.console.cache import QueryCache
from tracking.console.config import ConsoleConfig
from tracking.console.errors import NetworkError, RequestTimeout, ServerValidationError, UpdateInFlight
from tracking.console.ledger import TrackingLedger
from tracking.console.models import Attribution, OrderSnapshot
from tracking.console.optimistic import OptimisticUpdateCoordinator, UpdatePhase
from tracking.console.query import TrackingQuery
from tracking.status import guard

pytestmark = pytest.mark.anyio


class GatedBackend(FakeOrderBackend):
    """Holds status updates until ``gate`` is set."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def update_order_status(self, order_id, status, message=None, location=None):
        await self.gate.wait()
        return await super().update_order_status(order_id, status, message, location)


def _coordinator(backend=None, **seed):
    backend = backend or FakeOrderBackend()
    seed.setdefault("payment_status", "paid")
    order = backend.seed(**seed)
    cache = QueryCache()
    config = ConsoleConfig()
    coordinator = OptimisticUpdateCoordinator(
        order,
        TrackingLedger(backend, cache, config),
        TrackingQuery(backend, cache, config),
        admin=Attribution(name="Ngozi", email="ngozi@example.com"),
    )
    return backend, coordinator


def _record(coordinator):
    seen = []
    coordinator.on_change(lambda c: seen.append((c.phase, len(c.view.tracking_history))))
    return seen


class TestRollback:
    async def test_network_failure_rolls_back_to_pre_submit_history(self):
        backend, coordinator = _coordinator()
        backend.configure(should_succeed=False)
        before = len(coordinator.order.tracking_history)
        seen = _record(coordinator)

        outcome = await coordinator.submit("preparing", "Packed")

        assert seen == [(UpdatePhase.SUBMITTING, before + 1), (UpdatePhase.ROLLED_BACK, before)]
        assert outcome.phase is UpdatePhase.ROLLED_BACK
        assert not outcome.ok
        assert isinstance(outcome.error, NetworkError)
        assert len(coordinator.view.tracking_history) == before
        assert coordinator.speculative is None

    @pytest.mark.parametrize("kind,error", [("timeout", RequestTimeout), ("validation", ServerValidationError)])
    async def test_other_backend_failures_roll_back(self, kind, error):
        backend, coordinator = _coordinator()
        backend.configure(should_succeed=False, failure_reason="Rejected by server", failure_kind=kind)
        outcome = await coordinator.submit("preparing", "Packed")
        assert outcome.phase is UpdatePhase.ROLLED_BACK
        assert isinstance(outcome.error, error)
        assert coordinator.error.message == "Rejected by server"

    async def test_rollback_restores_authoritative_status(self):
        backend, coordinator = _coordinator()
        backend.configure(should_succeed=False)
        await coordinator.submit("preparing", "Packed")
        assert coordinator.view.current_status == "pending_payment"

    async def test_unreadable_success_body_rolls_back(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        config = ConsoleConfig(base_url="http://orders.test")
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=config.base_url)
        backend = HttpOrderBackend(config, client=client)
        order = OrderSnapshot(id="o-1", payment_status="paid", current_status="processing")
        cache = QueryCache()
        coordinator = OptimisticUpdateCoordinator(
            order, TrackingLedger(backend, cache, config), TrackingQuery(backend, cache, config)
        )

        outcome = await coordinator.submit("preparing", "Packed")

        assert coordinator.phase is UpdatePhase.ROLLED_BACK
        assert isinstance(outcome.error, NetworkError)
        assert coordinator.speculative is None
        assert coordinator.view.current_status == "processing"
        assert coordinator.can_submit("preparing")

    async def test_unexpected_error_rolls_back(self):
        backend, coordinator = _coordinator()

        async def broken_update(order_id, status, message=None, location=None):
            raise RuntimeError("boom")

        backend.update_order_status = broken_update
        outcome = await coordinator.submit("preparing", "Packed")
        assert outcome.phase is UpdatePhase.ROLLED_BACK
        assert isinstance(outcome.error, NetworkError)
        assert "boom" in outcome.error.message

        del backend.update_order_status
        assert (await coordinator.submit("preparing", "Packed")).ok


class TestCommit:
    async def test_success_replaces_speculative_entry_with_server_order(self):
        backend, coordinator = _coordinator()
        before = len(coordinator.order.tracking_history)
        seen = _record(coordinator)

        outcome = await coordinator.submit("preparing", "Packed", "Warehouse 3")

        assert [phase for phase, _ in seen] == [UpdatePhase.SUBMITTING, UpdatePhase.COMMITTED]
        assert outcome.ok
        assert coordinator.speculative is None
        assert coordinator.order.current_status == "preparing"
        assert len(coordinator.order.tracking_history) == before + 1
        assert not coordinator.order.tracking_history[-1].speculative
        assert coordinator.order.tracking_history[-1].location == "Warehouse 3"

    async def test_commit_refetches_the_order(self):
        backend, coordinator = _coordinator()
        await coordinator.submit("preparing", "Packed")
        assert backend.calls[-1] == ("get_order", coordinator.order.id)

    async def test_failed_refetch_falls_back_to_append_response(self):
        backend, coordinator = _coordinator()

        async def broken_get(order_id):
            raise NetworkError("refetch failed")

        backend.get_order = broken_get
        outcome = await coordinator.submit("preparing", "Packed")
        assert outcome.ok
        assert coordinator.order.current_status == "preparing"

    async def test_submit_again_after_commit(self):
        _, coordinator = _coordinator()
        await coordinator.submit("processing", "One")
        await coordinator.submit("preparing", "Two")
        assert coordinator.order.current_status == "preparing"


class TestSpeculativeEntry:
    async def test_entry_is_visible_while_submitting(self):
        backend, coordinator = _coordinator(backend=GatedBackend())
        task = asyncio.create_task(coordinator.submit("preparing", ""))
        while coordinator.phase is not UpdatePhase.SUBMITTING:
            await asyncio.sleep(0)

        entry = coordinator.history()[-1]
        assert entry.speculative
        assert entry.status == "preparing"
        assert entry.message == "Order status updated"
        assert entry.updated_by.name == "Ngozi"
        assert entry.timestamp is not None
        assert coordinator.view.current_status == "preparing"
        assert coordinator.order.current_status == "pending_payment"

        backend.gate.set()
        await task

    async def test_second_submit_while_in_flight_is_refused(self):
        backend, coordinator = _coordinator(backend=GatedBackend())
        task = asyncio.create_task(coordinator.submit("preparing", "Packed"))
        while coordinator.phase is not UpdatePhase.SUBMITTING:
            await asyncio.sleep(0)

        assert not coordinator.can_submit()
        with pytest.raises(UpdateInFlight):
            await coordinator.submit("processing", "Again")

        backend.gate.set()
        outcome = await task
        assert outcome.ok


class TestGuard:
    async def test_guard_rejection_sends_nothing_and_stays_idle(self):
        backend, coordinator = _coordinator(payment_status="pending")
        seen = _record(coordinator)
        with pytest.raises(guard.PaymentPending):
            await coordinator.submit("processing", "Too early")
        assert coordinator.phase is UpdatePhase.IDLE
        assert seen == []
        assert backend.calls == []

    async def test_can_submit(self):
        _, coordinator = _coordinator(payment_status="pending")
        assert coordinator.can_submit("cancelled")
        assert not coordinator.can_submit("processing")

    async def test_delivered_order_cannot_submit(self):
        _, coordinator = _coordinator(current_status="delivered")
        assert not coordinator.can_submit()


class TestDetach:
    async def test_detached_view_is_not_updated(self):
        backend, coordinator = _coordinator(backend=GatedBackend())
        seen = _record(coordinator)
        task = asyncio.create_task(coordinator.submit("preparing", "Packed"))
        while coordinator.phase is not UpdatePhase.SUBMITTING:
            await asyncio.sleep(0)

        coordinator.detach()
        backend.gate.set()
        outcome = await task

        assert outcome.ok
        assert outcome.order.current_status == "preparing"
        assert coordinator.order.current_status == "pending_payment"
        assert seen == [(UpdatePhase.SUBMITTING, 2)]

    async def test_request_still_lands_after_detach(self):
        backend, coordinator = _coordinator(backend=GatedBackend())
        task = asyncio.create_task(coordinator.submit("preparing", "Packed"))
        while coordinator.phase is not UpdatePhase.SUBMITTING:
            await asyncio.sleep(0)
        coordinator.detach()
        backend.gate.set()
        await task
        assert backend.orders[coordinator.order.id].current_status == "preparing"
