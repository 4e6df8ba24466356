"""Tests for ExpireUnpaidOrders — cancelling orders whose payment never completed."""

from datetime import UTC, datetime, timedelta

from ordering.order.order import Order
from ordering.order.reconciliation import ExpireUnpaidOrders
from ordering.order.status import UpdateOrderStatus
from ordering.payment.creation import CreatePaymentIntent
from ordering.payment.intent import PaymentIntent
from protean import current_domain


def process(command):
    return current_domain.process(command, asynchronous=False)


def _later(minutes):
    return datetime.now(UTC) + timedelta(minutes=minutes)


class TestExpireUnpaidOrders:
    def test_fresh_orders_are_kept(self, gateway, place_order):
        order_id = place_order()
        assert process(ExpireUnpaidOrders(as_of=_later(5))) == 0
        assert current_domain.repository_for(Order).get(order_id).status == "pending"

    def test_stale_pending_order_is_cancelled(self, gateway, place_order):
        order_id = place_order()

        assert process(ExpireUnpaidOrders(as_of=_later(31))) == 1

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "cancelled"
        assert order.cancellation_reason == "Payment not completed within 30 minutes"

    def test_open_intent_is_cancelled_with_the_order(self, gateway, place_order):
        order_id = place_order()
        intent_id = process(CreatePaymentIntent(order_id=order_id))["payment_intent_id"]

        assert process(ExpireUnpaidOrders(older_than_minutes=10, as_of=_later(11))) == 1

        assert current_domain.repository_for(PaymentIntent).get(intent_id).status == "cancelled"
        assert gateway.intents[intent_id]["status"] == "canceled"
        assert current_domain.repository_for(Order).get(order_id).status == "cancelled"

    def test_captured_payment_blocks_expiry(self, gateway, place_order):
        order_id = place_order()
        intent_id = process(CreatePaymentIntent(order_id=order_id))["payment_intent_id"]
        gateway.capture(intent_id)

        assert process(ExpireUnpaidOrders(as_of=_later(60))) == 0
        assert current_domain.repository_for(Order).get(order_id).status == "payment_pending"

    def test_confirmed_orders_are_not_touched(self, gateway, place_order):
        order_id = place_order()
        process(UpdateOrderStatus(order_id=order_id, status="confirmed", version=1))

        assert process(ExpireUnpaidOrders(as_of=_later(60))) == 0

    def test_timeout_from_environment(self, monkeypatch, gateway, place_order):
        monkeypatch.setenv("UNPAID_ORDER_TIMEOUT_MINUTES", "5")
        place_order()
        assert process(ExpireUnpaidOrders(as_of=_later(6))) == 1
