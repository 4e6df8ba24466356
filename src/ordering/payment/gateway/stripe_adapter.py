"""Stripe payment gateway adapter built on the official ``stripe`` SDK.

Every call passes the API key explicitly instead of mutating the SDK's
global configuration, and intent creation forwards our idempotency key so a
retried checkout never opens a second intent.
"""

import json

import stripe
import structlog

from ordering.payment.gateway.port import (
    GatewayUnavailable,
    IntentResult,
    IntentStatus,
    PaymentGateway,
    WebhookEvent,
)

logger = structlog.get_logger(__name__)

_WEBHOOK_STATUSES = {
    "payment_intent.succeeded": "succeeded",
    "payment_intent.payment_failed": "failed",
}


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_intent(self, amount_minor, currency, metadata, idempotency_key):
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency.lower(),
                metadata=metadata or {},
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
                idempotency_key=idempotency_key,
            )
        except stripe.CardError as exc:
            return IntentResult(success=False, status="failed", failure_reason=exc.user_message or str(exc))
        except stripe.StripeError as exc:
            logger.warning("Stripe intent creation failed", error=str(exc), idempotency_key=idempotency_key)
            return IntentResult(success=False, status="error", failure_reason=str(exc))

        return IntentResult(
            success=True,
            intent_id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
        )

    def retrieve_intent(self, intent_id):
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise GatewayUnavailable(str(exc)) from exc

        return IntentStatus(
            intent_id=intent.id,
            status=intent.status,
            amount=intent.amount,
            amount_received=intent.amount_received or 0,
            currency=intent.currency.upper(),
        )

    def cancel_intent(self, intent_id):
        try:
            intent = stripe.PaymentIntent.cancel(intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            return IntentResult(success=False, intent_id=intent_id, failure_reason=str(exc))
        return IntentResult(success=True, intent_id=intent.id, status=intent.status)

    def verify_webhook_signature(self, payload, signature):
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError):
            return False
        return True

    def parse_webhook_event(self, payload):
        event = json.loads(payload)
        status = _WEBHOOK_STATUSES.get(event.get("type"))
        if status is None:
            return None

        intent = event["data"]["object"]
        last_error = intent.get("last_payment_error") or {}
        return WebhookEvent(
            intent_id=intent["id"],
            status=status,
            amount_received=int(intent.get("amount_received") or 0),
            failure_reason=last_error.get("message"),
        )
