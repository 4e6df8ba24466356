"""Checkout stage transitions — one command per step of the workflow.

Each step commits in its own unit of work so that a failure in a later step
never rolls back what an earlier one recorded (the placed order, the error
shown to the customer).
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.checkout.session import CheckoutSession
from ordering.domain import ordering


@ordering.command(part_of="CheckoutSession")
class RecordCheckoutOrder:
    session_id = Identifier(required=True)
    order_id = Identifier(required=True)
    fingerprint = String(required=True, max_length=64)
    delivery_address = Text(required=True)


@ordering.command(part_of="CheckoutSession")
class RecordCheckoutPayment:
    session_id = Identifier(required=True)
    payment_intent_id = String(required=True, max_length=255)
    client_secret = String(max_length=255)


@ordering.command(part_of="CheckoutSession")
class CompleteCheckout:
    session_id = Identifier(required=True)


@ordering.command(part_of="CheckoutSession")
class FailCheckout:
    session_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@ordering.command(part_of="CheckoutSession")
class ReturnToDetails:
    session_id = Identifier(required=True)


@ordering.command(part_of="CheckoutSession")
class RecordCheckoutError:
    session_id = Identifier(required=True)
    message = String(required=True, max_length=500)


@ordering.command_handler(part_of=CheckoutSession)
class CheckoutStagesHandler:
    def _apply(self, session_id, action):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(session_id)
        result = action(session)
        repo.add(session)
        return result

    @handle(RecordCheckoutOrder)
    def record_checkout_order(self, command):
        self._apply(
            command.session_id,
            lambda s: s.record_order_placed(command.order_id, command.fingerprint, command.delivery_address),
        )

    @handle(RecordCheckoutPayment)
    def record_checkout_payment(self, command):
        self._apply(
            command.session_id,
            lambda s: s.record_payment_started(command.payment_intent_id, command.client_secret),
        )

    @handle(CompleteCheckout)
    def complete_checkout(self, command):
        return self._apply(command.session_id, lambda s: s.complete())

    @handle(FailCheckout)
    def fail_checkout(self, command):
        self._apply(command.session_id, lambda s: s.fail(command.reason))

    @handle(ReturnToDetails)
    def return_to_details(self, command):
        self._apply(command.session_id, lambda s: s.return_to_details())

    @handle(RecordCheckoutError)
    def record_checkout_error(self, command):
        self._apply(command.session_id, lambda s: s.record_error(command.message))
