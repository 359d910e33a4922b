"""Optimistic status updates.

A coordinator is bound to one order view. ``submit`` shows the requested
status immediately as a speculative ledger entry, sends it, and then either
commits (speculative entry replaced by the server's order) or rolls back
(speculative entry dropped, the last authoritative order shown again).

Phase changes:

    IDLE ──submit──▶ SUBMITTING ──ok──▶ COMMITTED
                          │
                          └──error──▶ ROLLED_BACK

A guard rejection leaves the phase where it was and sends nothing. Once
``detach`` is called the request still completes, but the coordinator no
longer changes state or notifies observers.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

import structlog

from tracking.console.errors import ConsoleError, NetworkError, UpdateInFlight
from tracking.console.ledger import TrackingLedger
from tracking.console.models import Attribution, OrderSnapshot, TrackingEntry
from tracking.console.query import TrackingQuery
from tracking.status import guard, projector
from tracking.status.catalog import DEFAULT_UPDATE_MESSAGE

logger = structlog.get_logger(__name__)


class UpdatePhase(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class UpdateOutcome:
    phase: UpdatePhase
    order: OrderSnapshot
    error: ConsoleError | None = None

    @property
    def ok(self) -> bool:
        return self.phase is UpdatePhase.COMMITTED


class OptimisticUpdateCoordinator:
    def __init__(
        self,
        order: OrderSnapshot,
        ledger: TrackingLedger,
        query: TrackingQuery,
        admin: Attribution | None = None,
        on_change: Callable[["OptimisticUpdateCoordinator"], None] | None = None,
    ):
        self.order = order
        self.ledger = ledger
        self.query = query
        self.admin = admin or Attribution(name="Admin")
        self.phase = UpdatePhase.IDLE
        self.speculative: TrackingEntry | None = None
        self.error: ConsoleError | None = None
        self.detached = False
        self._observers: list[Callable] = [on_change] if on_change else []

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def on_change(self, callback: Callable[["OptimisticUpdateCoordinator"], None]) -> None:
        self._observers.append(callback)

    def detach(self) -> None:
        """The view is gone. In-flight results are logged and otherwise ignored."""
        self.detached = True
        self._observers.clear()

    def _transition(self, phase: UpdatePhase) -> None:
        self.phase = phase
        for callback in list(self._observers):
            callback(self)

    # -------------------------------------------------------------------
    # View
    # -------------------------------------------------------------------
    @property
    def view(self) -> OrderSnapshot:
        """The order as displayed: authoritative, plus the speculative entry if one is pending."""
        if self.speculative is None:
            return self.order
        return self.order.with_entry(self.speculative)

    def history(self) -> list[projector.TimelineEntry]:
        return projector.history_view(self.order, self.speculative)

    def can_submit(self, status=None) -> bool:
        if self.phase is UpdatePhase.SUBMITTING or not projector.can_update(self.order):
            return False
        return status is None or guard.is_admissible(self.order, status)

    # -------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------
    async def submit(self, status: str, message: str = "", location: str = "") -> UpdateOutcome:
        """Apply ``status`` speculatively, send it, then commit or roll back.

        Raises ``GuardError`` (nothing sent, phase unchanged) or
        ``UpdateInFlight`` if a previous submit has not finished.
        Send failures do not raise; they come back as a ROLLED_BACK outcome.
        """
        if self.phase is UpdatePhase.SUBMITTING:
            raise UpdateInFlight()
        guard.validate(self.order, status)

        self.error = None
        self.speculative = TrackingEntry(
            status=status,
            message=(message or "").strip() or DEFAULT_UPDATE_MESSAGE,
            location=(location or "").strip() or None,
            timestamp=datetime.now(UTC),
            updated_by=self.admin,
            speculative=True,
        )
        self._transition(UpdatePhase.SUBMITTING)

        try:
            updated = await self.ledger.append(self.order, status, message, location)
        except ConsoleError as exc:
            return self._rollback(exc)
        except Exception as exc:
            logger.exception("Unexpected failure sending status update", order_id=self.order.id)
            return self._rollback(NetworkError(f"Status update failed: {exc}"))

        try:
            updated = await self.query.by_id(self.order.id, fresh=True)
        except Exception as exc:
            logger.warning("Refetch after update failed", order_id=self.order.id, error=str(exc))

        return self._commit(updated)

    def _commit(self, updated: OrderSnapshot) -> UpdateOutcome:
        if self.detached:
            logger.info("Update committed after view closed", order_id=updated.id, status=updated.current_status)
            return UpdateOutcome(UpdatePhase.COMMITTED, updated)

        self.order = updated
        self.speculative = None
        self._transition(UpdatePhase.COMMITTED)
        return UpdateOutcome(self.phase, self.order)

    def _rollback(self, exc: ConsoleError) -> UpdateOutcome:
        if self.detached:
            logger.warning("Update failed after view closed", order_id=self.order.id, error=exc.message)
            return UpdateOutcome(UpdatePhase.ROLLED_BACK, self.order, exc)

        logger.warning(
            "Rolling back status update",
            order_id=self.order.id,
            status=self.speculative.status if self.speculative else None,
            error=exc.message,
        )
        self.speculative = None
        self.error = exc
        self._transition(UpdatePhase.ROLLED_BACK)
        return UpdateOutcome(self.phase, self.order, exc)
