"""Order-side payment linkage — commands issued by the payment workflow."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class RecordPaymentPending:
    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class ConfirmOrderPayment:
    """Confirm an order after the provider reported ``amount_received`` minor units."""

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)
    amount_received = Integer(required=True, min_value=0)


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(RecordPaymentPending)
    def record_payment_pending(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_pending(command.payment_intent_id)
        repo.add(order)

    @handle(ConfirmOrderPayment)
    def confirm_order_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        changed = order.confirm_payment(command.payment_intent_id, command.amount_received)
        if changed:
            repo.add(order)
        return changed
