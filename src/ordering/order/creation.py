"""Order placement — command and handler.

The handler validates references, prices the lines on the server, checks the
client's displayed total when one is supplied and only then persists the
order. Any failure raises before the repository is touched.
"""

import json
import os

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.validation import OrderValidator
from ordering.pricing.calculator import calculate_pricing, subtotal_of, verify_client_total

logger = structlog.get_logger(__name__)


def default_currency():
    return os.getenv("PAYMENT_CURRENCY", "INR").upper()


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = String(required=True, max_length=64)
    shop_id = String(required=True, max_length=64)
    items = Text(required=True)  # JSON: [{"food_item_id": ..., "quantity": ...}]
    address = Text(required=True)
    total_amount = Float()  # Client-displayed total, checked but never charged
    applied_offer_id = Identifier()
    currency = String(max_length=3)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items

        validated = OrderValidator().validate(command.customer_id, command.shop_id, items)
        breakdown = calculate_pricing(subtotal_of(validated.lines))
        verify_client_total(command.total_amount, breakdown)

        order = Order.place(
            customer_id=validated.customer_id,
            shop_id=validated.shop_id,
            lines=validated.lines,
            breakdown=breakdown,
            address=command.address,
            currency=command.currency or default_currency(),
            applied_offer_id=command.applied_offer_id,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=validated.customer_id,
            shop_id=validated.shop_id,
            line_count=len(validated.lines),
            total_amount=order.total_amount,
        )
        return str(order.id)
