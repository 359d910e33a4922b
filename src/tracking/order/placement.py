"""Order placement — command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from tracking.domain import tracking
from tracking.order.order import Order
from tracking.status.catalog import OrderType, PaymentStatus


@tracking.command(part_of="Order")
class PlaceOrder:
    """Open a tracking ledger for a newly placed order."""

    order_number = String(required=True, max_length=50)
    order_type = String(max_length=50, default=OrderType.STANDARD.value)
    payment_status = String(max_length=20, default=PaymentStatus.PENDING.value)
    tracking_number = String(max_length=100)


@tracking.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = Order.place(
            order_number=command.order_number,
            order_type=command.order_type or OrderType.STANDARD.value,
            payment_status=command.payment_status or PaymentStatus.PENDING.value,
            tracking_number=command.tracking_number,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
