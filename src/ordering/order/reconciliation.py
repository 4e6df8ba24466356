"""Unpaid order reconciliation — command and handler for expiring stale orders.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob) via the maintenance API endpoint. Orders still pending or awaiting
payment past the timeout are cancelled, and their open payment intents are
cancelled at the provider first. An intent the provider already captured
blocks the cancellation so the order can still be confirmed by its webhook.
"""

import os
from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.cancellation import CancelOrder
from ordering.order.order import Order
from ordering.payment.cancellation import CancelPaymentIntent
from ordering.payment.intent import PaymentIntent

logger = structlog.get_logger(__name__)


def unpaid_timeout_minutes():
    return int(os.getenv("UNPAID_ORDER_TIMEOUT_MINUTES", "30"))


@ordering.command(part_of="Order")
class ExpireUnpaidOrders:
    """Cancel orders whose payment did not complete within the timeout."""

    older_than_minutes = Integer(min_value=1)
    as_of = DateTime()  # Optional: defaults to now


@ordering.command_handler(part_of=Order)
class ExpireUnpaidOrdersHandler:
    @handle(ExpireUnpaidOrders)
    def expire_unpaid_orders(self, command):
        as_of = command.as_of or datetime.now(UTC)
        minutes = command.older_than_minutes or unpaid_timeout_minutes()
        cutoff = as_of - timedelta(minutes=minutes)

        stale = current_domain.repository_for(Order).find_open_before(cutoff)
        logger.info("Checking for unpaid orders", cutoff=cutoff.isoformat(), candidates=len(stale))
        if not stale:
            return 0

        intents = current_domain.repository_for(PaymentIntent)
        expired_count = 0
        for order in stale:
            try:
                for intent in intents.find_by_order(order.id):
                    if intent.is_open:
                        current_domain.process(
                            CancelPaymentIntent(payment_intent_id=str(intent.id)),
                            asynchronous=False,
                        )
                current_domain.process(
                    CancelOrder(
                        order_id=str(order.id),
                        reason=f"Payment not completed within {minutes} minutes",
                    ),
                    asynchronous=False,
                )
                expired_count += 1
            except (ValidationError, InvalidOperationError) as exc:
                logger.warning("Failed to expire unpaid order", order_id=str(order.id), error=str(exc))

        logger.info("Unpaid order reconciliation complete", expired_count=expired_count)
        return expired_count
