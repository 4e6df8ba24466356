"""Domain events for the PaymentIntent aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="PaymentIntent")
class PaymentIntentCreated:
    """The provider opened an intent for an order's authoritative total."""

    __version__ = 1

    payment_intent_id = String(required=True)
    order_id = Identifier(required=True)
    amount = Integer(required=True)  # minor units
    currency = String(max_length=3, required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="PaymentIntent")
class PaymentIntentSucceeded:
    __version__ = 1

    payment_intent_id = String(required=True)
    order_id = Identifier(required=True)
    amount_received = Integer(required=True)
    succeeded_at = DateTime(required=True)


@ordering.event(part_of="PaymentIntent")
class PaymentIntentFailed:
    __version__ = 1

    payment_intent_id = String(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@ordering.event(part_of="PaymentIntent")
class PaymentIntentCancelled:
    __version__ = 1

    payment_intent_id = String(required=True)
    order_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="PaymentIntent")
class PaymentIntentReopened:
    """The provider handed back a previously failed intent for another attempt."""

    __version__ = 1

    payment_intent_id = String(required=True)
    order_id = Identifier(required=True)
    reopened_at = DateTime(required=True)
