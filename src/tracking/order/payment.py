"""Payment confirmation — command and handler.

Settles the order's payment status. The ledger is left untouched: the
``payment_completed`` step is projected at read time until an admin records it.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from tracking.domain import tracking
from tracking.order.order import Order


@tracking.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)


@tracking.command_handler(part_of=Order)
class ConfirmPaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.confirm_payment():
            repo.add(order)
        return str(order.id)
