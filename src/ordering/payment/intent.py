"""PaymentIntent aggregate (CQRS) — our record of a provider payment intent.

The aggregate identity is the provider-issued intent id. ``amount`` is always
the order total in minor units at the time the intent was opened; the client
never supplies it.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering
from ordering.payment.events import (
    PaymentIntentCancelled,
    PaymentIntentCreated,
    PaymentIntentFailed,
    PaymentIntentReopened,
    PaymentIntentSucceeded,
)


class IntentState(Enum):
    REQUIRES_PAYMENT = "requires_payment"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


def idempotency_key_for(order_id, amount_minor):
    """One provider intent per order and amount, however often checkout retries."""
    return f"order-{order_id}-{amount_minor}"


@ordering.aggregate
class PaymentIntent:
    order_id = Identifier(required=True)
    amount = Integer(required=True, min_value=0)
    amount_received = Integer(default=0, min_value=0)
    currency = String(max_length=3, required=True)
    client_secret = String(max_length=255)
    status = String(choices=IntentState, default=IntentState.REQUIRES_PAYMENT.value)
    idempotency_key = String(max_length=255)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, intent_id, order_id, amount, currency, client_secret):
        now = datetime.now(UTC)
        intent = cls(
            id=intent_id,
            order_id=order_id,
            amount=amount,
            currency=currency.upper(),
            client_secret=client_secret,
            status=IntentState.REQUIRES_PAYMENT.value,
            idempotency_key=idempotency_key_for(order_id, amount),
            created_at=now,
            updated_at=now,
        )
        intent.raise_(
            PaymentIntentCreated(
                payment_intent_id=intent_id,
                order_id=str(order_id),
                amount=amount,
                currency=intent.currency,
                created_at=now,
            )
        )
        return intent

    @property
    def is_open(self):
        return self.status == IntentState.REQUIRES_PAYMENT.value

    def _require_open(self, action):
        if not self.is_open:
            raise ValidationError({"status": [f"Cannot {action} a payment intent in {self.status} state"]})

    def mark_succeeded(self, amount_received):
        self._require_open("confirm")
        now = datetime.now(UTC)
        self.status = IntentState.SUCCEEDED.value
        self.amount_received = amount_received
        self.updated_at = now
        self.raise_(
            PaymentIntentSucceeded(
                payment_intent_id=str(self.id),
                order_id=str(self.order_id),
                amount_received=amount_received,
                succeeded_at=now,
            )
        )

    def mark_failed(self, reason):
        self._require_open("fail")
        now = datetime.now(UTC)
        self.status = IntentState.FAILED.value
        self.failure_reason = reason
        self.updated_at = now
        self.raise_(
            PaymentIntentFailed(
                payment_intent_id=str(self.id),
                order_id=str(self.order_id),
                reason=reason,
                failed_at=now,
            )
        )

    def reopen(self):
        """Accept another payment attempt on an intent whose last attempt failed."""
        if self.status != IntentState.FAILED.value:
            raise ValidationError({"status": [f"Cannot reopen a payment intent in {self.status} state"]})
        now = datetime.now(UTC)
        self.status = IntentState.REQUIRES_PAYMENT.value
        self.failure_reason = None
        self.updated_at = now
        self.raise_(
            PaymentIntentReopened(
                payment_intent_id=str(self.id),
                order_id=str(self.order_id),
                reopened_at=now,
            )
        )

    def cancel(self):
        self._require_open("cancel")
        now = datetime.now(UTC)
        self.status = IntentState.CANCELLED.value
        self.updated_at = now
        self.raise_(
            PaymentIntentCancelled(
                payment_intent_id=str(self.id),
                order_id=str(self.order_id),
                cancelled_at=now,
            )
        )
