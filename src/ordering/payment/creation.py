"""Payment intent creation — command and handler.

The charged amount and currency are always derived from the stored order. An
open intent for the same order and amount is handed back without calling the
provider, and provider calls carry an idempotency key so a retried request
cannot open a second intent either. When that key hands back an intent whose
last attempt failed, the intent is reopened for another attempt.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import PaymentProviderError
from ordering.order.order import Order
from ordering.order.payment import RecordPaymentPending
from ordering.payment.gateway import get_gateway
from ordering.payment.intent import IntentState, PaymentIntent, idempotency_key_for

logger = structlog.get_logger(__name__)


def _summary(intent):
    return {
        "payment_intent_id": str(intent.id),
        "client_secret": intent.client_secret,
        "amount": intent.amount,
        "currency": intent.currency,
        "order_id": str(intent.order_id),
    }


@ordering.command(part_of="PaymentIntent")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    currency = String(max_length=3)


@ordering.command_handler(part_of=PaymentIntent)
class CreatePaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if not order.is_open:
            raise ValidationError({"order_id": [f"Cannot create a payment intent for a {order.status} order"]})

        amount = order.amount_minor
        currency = order.currency.upper()
        if command.currency and command.currency.upper() != currency:
            raise ValidationError(
                {"currency": [f"Order {order.id} is priced in {currency}, not {command.currency.upper()}"]}
            )
        intents = current_domain.repository_for(PaymentIntent)

        intent = intents.find_open_for_order(order.id, amount, currency)
        if intent is not None:
            logger.info("Reusing open payment intent", order_id=str(order.id), payment_intent_id=str(intent.id))
        else:
            result = get_gateway().create_intent(
                amount_minor=amount,
                currency=currency,
                metadata={"order_id": str(order.id), "customer_id": str(order.customer_id)},
                idempotency_key=idempotency_key_for(order.id, amount),
            )
            if not result.success:
                logger.warning(
                    "Payment intent creation failed",
                    order_id=str(order.id),
                    reason=result.failure_reason,
                )
                raise PaymentProviderError(result.failure_reason or "Payment provider error")

            intent = intents.find_by_id(result.intent_id)
            if intent is None:
                intent = PaymentIntent.open(
                    intent_id=result.intent_id,
                    order_id=str(order.id),
                    amount=amount,
                    currency=currency,
                    client_secret=result.client_secret,
                )
            elif intent.status == IntentState.FAILED.value:
                # Same idempotency key, so the provider returned the intent whose attempt failed
                intent.reopen()
            elif intent.status == IntentState.CANCELLED.value:
                raise PaymentProviderError(f"Payment intent {intent.id} was cancelled at the provider")
            intents.add(intent)
            logger.info(
                "Payment intent created",
                order_id=str(order.id),
                payment_intent_id=str(intent.id),
                amount=amount,
                currency=currency,
            )

        current_domain.process(
            RecordPaymentPending(order_id=str(order.id), payment_intent_id=str(intent.id)),
            asynchronous=False,
        )
        return _summary(intent)
