"""Configurable in-memory payment gateway for development and testing.

Intents live in a dict. ``capture()`` plays the part of the customer's
browser completing payment, so tests can drive the full checkout without a
provider. ``configure()`` (also reachable through
``/payments/gateway/configure``) switches intent creation between success
and decline.
"""

import json
from uuid import uuid4

from ordering.payment.gateway.port import (
    GatewayUnavailable,
    IntentResult,
    IntentStatus,
    PaymentGateway,
    WebhookEvent,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []
        self.intents: dict[str, dict] = {}
        self._keys: dict[str, str] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    # -------------------------------------------------------------------
    # Port
    # -------------------------------------------------------------------
    def create_intent(self, amount_minor, currency, metadata, idempotency_key):
        self.calls.append(
            {
                "method": "create_intent",
                "amount": amount_minor,
                "currency": currency,
                "metadata": dict(metadata or {}),
                "idempotency_key": idempotency_key,
            }
        )

        if not self.should_succeed:
            return IntentResult(success=False, status="failed", failure_reason=self.failure_reason)

        if idempotency_key in self._keys:
            intent = self.intents[self._keys[idempotency_key]]
        else:
            intent_id = f"pi_fake_{uuid4().hex[:16]}"
            intent = {
                "id": intent_id,
                "amount": amount_minor,
                "currency": currency.upper(),
                "status": "requires_payment_method",
                "amount_received": 0,
                "client_secret": f"{intent_id}_secret_{uuid4().hex[:8]}",
                "metadata": dict(metadata or {}),
            }
            self.intents[intent_id] = intent
            self._keys[idempotency_key] = intent_id

        return IntentResult(
            success=True,
            intent_id=intent["id"],
            client_secret=intent["client_secret"],
            status=intent["status"],
        )

    def retrieve_intent(self, intent_id):
        self.calls.append({"method": "retrieve_intent", "intent_id": intent_id})
        intent = self.intents.get(intent_id)
        if intent is None:
            raise GatewayUnavailable(f"No such payment intent: {intent_id}")
        return IntentStatus(
            intent_id=intent["id"],
            status=intent["status"],
            amount=intent["amount"],
            amount_received=intent["amount_received"],
            currency=intent["currency"],
        )

    def cancel_intent(self, intent_id):
        self.calls.append({"method": "cancel_intent", "intent_id": intent_id})
        intent = self.intents.get(intent_id)
        if intent is None:
            return IntentResult(success=False, intent_id=intent_id, failure_reason="No such payment intent")
        if intent["status"] == "succeeded":
            return IntentResult(
                success=False,
                intent_id=intent_id,
                status="succeeded",
                failure_reason="Captured intents cannot be cancelled",
            )
        intent["status"] = "canceled"
        return IntentResult(success=True, intent_id=intent_id, status="canceled")

    def verify_webhook_signature(self, payload, signature):  # noqa: ARG002
        return signature == TEST_SIGNATURE

    def parse_webhook_event(self, payload):
        data = json.loads(payload)
        return WebhookEvent(
            intent_id=data["payment_intent_id"],
            status=data["status"],
            amount_received=int(data.get("amount_received") or 0),
            failure_reason=data.get("failure_reason"),
        )

    # -------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------
    def capture(self, intent_id: str, amount: int | None = None) -> None:
        """Simulate the customer completing payment, optionally for a partial amount."""
        intent = self.intents[intent_id]
        intent["status"] = "succeeded"
        intent["amount_received"] = intent["amount"] if amount is None else amount

    def mark_processing(self, intent_id: str) -> None:
        self.intents[intent_id]["status"] = "processing"
