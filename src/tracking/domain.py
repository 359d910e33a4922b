"""Tracking bounded context — Order Fulfillment Tracking.

Owns the order status ledger: which statuses exist, which changes are
admissible, the append-only tracking history, and the read-side projection
the admin console renders. Uses CQRS because the ledger is a plain list of
facts appended one at a time and the console always re-reads after a write.
"""

from protean.domain import Domain

from tracking.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

tracking = Domain(name="tracking")
