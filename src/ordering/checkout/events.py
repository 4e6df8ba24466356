"""Domain events for the CheckoutSession aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="CheckoutSession")
class CheckoutOpened:
    __version__ = 1

    session_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    opened_at = DateTime(required=True)


@ordering.event(part_of="CheckoutSession")
class CartItemAdded:
    __version__ = 1

    session_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    food_item_id = Identifier(required=True)
    unit_price = Float(required=True)
    quantity = Integer(required=True)


@ordering.event(part_of="CheckoutSession")
class CartQuantityChanged:
    __version__ = 1

    session_id = Identifier(required=True)
    food_item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="CheckoutSession")
class CartItemRemoved:
    __version__ = 1

    session_id = Identifier(required=True)
    food_item_id = Identifier(required=True)


@ordering.event(part_of="CheckoutSession")
class CartCleared:
    __version__ = 1

    session_id = Identifier(required=True)


@ordering.event(part_of="CheckoutSession")
class CheckoutOrderPlaced:
    """Delivery details were accepted and an order now backs the checkout."""

    __version__ = 1

    session_id = Identifier(required=True)
    order_id = Identifier(required=True)


@ordering.event(part_of="CheckoutSession")
class CheckoutPaymentStarted:
    __version__ = 1

    session_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)


@ordering.event(part_of="CheckoutSession")
class CheckoutCompleted:
    __version__ = 1

    session_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    completed_at = DateTime(required=True)


@ordering.event(part_of="CheckoutSession")
class CheckoutFailed:
    __version__ = 1

    session_id = Identifier(required=True)
    previous_state = String(required=True)
    reason = String(required=True)
