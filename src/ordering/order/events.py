"""Domain events for the Order aggregate.

Events are versioned, immutable facts. Line items travel as a JSON array so
consumers receive the prices captured at order time.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A validated, priced order was persisted in the pending state."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    subtotal = Float(required=True)
    discount = Float(default=0.0)
    tax = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    total_amount = Float(required=True)
    currency = String(max_length=3, required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The shop or an admin moved the order along its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    version = Integer(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentPending:
    """A payment intent was created against the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    amount = Float(required=True)
    currency = String(max_length=3)


@ordering.event(part_of="Order")
class OrderPaymentConfirmed:
    """The provider confirmed full capture; the order is now confirmed."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    amount = Float(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(required=True)
    cancelled_at = DateTime(required=True)
