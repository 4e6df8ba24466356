"""Payment confirmation — explicit client confirmation and provider webhooks.

Both paths settle an intent the same way: the provider must report the
intent as succeeded with the full amount captured before the order is
confirmed. A client saying "payment succeeded" is never enough on its own.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import PaymentNotConfirmed, PaymentProviderError
from ordering.order.payment import ConfirmOrderPayment
from ordering.payment.gateway import get_gateway
from ordering.payment.gateway.port import GatewayUnavailable
from ordering.payment.intent import IntentState, PaymentIntent

logger = structlog.get_logger(__name__)


def _settle(intent, amount_received):
    """Mark ``intent`` succeeded and confirm its order."""
    if amount_received != intent.amount:
        raise PaymentNotConfirmed(f"Captured amount {amount_received} does not match intent amount {intent.amount}")

    if intent.status == IntentState.FAILED.value:
        # The customer retried on the same client secret after a failed attempt
        intent.reopen()
    if intent.is_open:
        intent.mark_succeeded(amount_received)
        current_domain.repository_for(PaymentIntent).add(intent)

    current_domain.process(
        ConfirmOrderPayment(
            order_id=str(intent.order_id),
            payment_intent_id=str(intent.id),
            amount_received=amount_received,
        ),
        asynchronous=False,
    )
    logger.info(
        "Payment confirmed",
        order_id=str(intent.order_id),
        payment_intent_id=str(intent.id),
        amount=amount_received,
    )
    return {
        "order_id": str(intent.order_id),
        "payment_intent_id": str(intent.id),
        "status": IntentState.SUCCEEDED.value,
        "amount": amount_received,
    }


@ordering.command(part_of="PaymentIntent")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)


@ordering.command(part_of="PaymentIntent")
class ProcessPaymentWebhook:
    """Apply a verified provider callback."""

    payment_intent_id = String(required=True, max_length=255)
    status = String(required=True, max_length=50)  # succeeded, failed
    amount_received = Integer(default=0)
    failure_reason = String(max_length=500)


@ordering.command_handler(part_of=PaymentIntent)
class PaymentConfirmationHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        intent = current_domain.repository_for(PaymentIntent).find_by_id(command.payment_intent_id)
        if intent is None or str(intent.order_id) != str(command.order_id):
            raise PaymentNotConfirmed("Payment intent does not belong to this order")

        if intent.status == IntentState.SUCCEEDED.value:
            return _settle(intent, intent.amount_received)

        try:
            remote = get_gateway().retrieve_intent(str(intent.id))
        except GatewayUnavailable as exc:
            raise PaymentProviderError(f"Could not verify payment: {exc}") from exc

        if not remote.succeeded:
            raise PaymentNotConfirmed(f"Payment has not completed (provider status: {remote.status})")
        return _settle(intent, remote.amount_received)

    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        intent = current_domain.repository_for(PaymentIntent).find_by_id(command.payment_intent_id)
        if intent is None:
            logger.warning("Webhook for unknown payment intent", payment_intent_id=command.payment_intent_id)
            return "ignored"

        if command.status == "succeeded":
            _settle(intent, command.amount_received or 0)
            return "confirmed"

        if intent.is_open:
            intent.mark_failed(command.failure_reason or "Unknown failure")
            current_domain.repository_for(PaymentIntent).add(intent)
            logger.info(
                "Payment failed",
                order_id=str(intent.order_id),
                payment_intent_id=str(intent.id),
                reason=intent.failure_reason,
            )
        return "failed"
