"""Tests for the PaymentIntent aggregate lifecycle."""

import pytest
from ordering.payment.events import PaymentIntentCreated, PaymentIntentReopened, PaymentIntentSucceeded
from ordering.payment.intent import IntentState, PaymentIntent, idempotency_key_for
from protean.exceptions import ValidationError


def _open_intent():
    return PaymentIntent.open(
        intent_id="pi_fake_001",
        order_id="order-001",
        amount=15799,
        currency="inr",
        client_secret="pi_fake_001_secret",
    )


class TestPaymentIntent:
    def test_open(self):
        intent = _open_intent()
        assert intent.id == "pi_fake_001"
        assert intent.status == IntentState.REQUIRES_PAYMENT.value
        assert intent.currency == "INR"
        assert intent.idempotency_key == "order-order-001-15799"
        assert intent.is_open
        assert isinstance(intent._events[0], PaymentIntentCreated)

    def test_idempotency_key_depends_on_amount(self):
        assert idempotency_key_for("order-001", 100) != idempotency_key_for("order-001", 200)

    def test_mark_succeeded(self):
        intent = _open_intent()
        intent.mark_succeeded(15799)
        assert intent.status == IntentState.SUCCEEDED.value
        assert intent.amount_received == 15799
        assert not intent.is_open
        assert isinstance(intent._events[-1], PaymentIntentSucceeded)

    def test_mark_failed(self):
        intent = _open_intent()
        intent.mark_failed("Card declined")
        assert intent.status == IntentState.FAILED.value
        assert intent.failure_reason == "Card declined"

    def test_cancel(self):
        intent = _open_intent()
        intent.cancel()
        assert intent.status == IntentState.CANCELLED.value

    def test_failed_intent_reopens_for_another_attempt(self):
        intent = _open_intent()
        intent.mark_failed("Card declined")
        intent.reopen()
        assert intent.is_open
        assert intent.failure_reason is None
        assert isinstance(intent._events[-1], PaymentIntentReopened)

        intent.mark_succeeded(15799)
        assert intent.status == IntentState.SUCCEEDED.value

    @pytest.mark.parametrize("settle", ["mark_succeeded", "cancel", None])
    def test_only_failed_intents_reopen(self, settle):
        intent = _open_intent()
        if settle == "mark_succeeded":
            intent.mark_succeeded(15799)
        elif settle == "cancel":
            intent.cancel()
        with pytest.raises(ValidationError):
            intent.reopen()

    @pytest.mark.parametrize("action", ["succeed", "fail", "cancel"])
    def test_settled_intent_cannot_change(self, action):
        intent = _open_intent()
        intent.mark_succeeded(15799)
        with pytest.raises(ValidationError):
            if action == "succeed":
                intent.mark_succeeded(15799)
            elif action == "fail":
                intent.mark_failed("late")
            else:
                intent.cancel()
