"""Checkout orchestration — drives a session from delivery details to payment.

Each step runs as its own command so its effects commit independently: an
order placed before the provider fails stays placed (and is reused on retry
or expired by reconciliation), and the error recorded on the session
survives the exception being re-raised to the caller.
"""

import json
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.checkout.details import DeliveryDetails
from ordering.checkout.session import CheckoutSession, CheckoutState
from ordering.checkout.stages import (
    CompleteCheckout,
    FailCheckout,
    RecordCheckoutError,
    RecordCheckoutOrder,
    RecordCheckoutPayment,
    ReturnToDetails,
)
from ordering.errors import EmptyOrder, PaymentNotConfirmed, error_message
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.payment.cancellation import CancelPaymentIntent
from ordering.payment.confirmation import ConfirmPayment
from ordering.payment.creation import CreatePaymentIntent
from ordering.payment.intent import PaymentIntent
from ordering.pricing.calculator import PricingBreakdown

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutProgress:
    session_id: str
    state: str
    pricing: PricingBreakdown
    order_id: str | None = None
    payment_intent_id: str | None = None
    client_secret: str | None = None
    error: str | None = None


class CheckoutOrchestrator:
    """Runs the checkout state machine on top of the session, order and payment commands."""

    def _process(self, command):
        return current_domain.process(command, asynchronous=False)

    def _session(self, session_id) -> CheckoutSession:
        return current_domain.repository_for(CheckoutSession).get(session_id)

    def progress(self, session_id) -> CheckoutProgress:
        session = self._session(session_id)
        return CheckoutProgress(
            session_id=str(session.id),
            state=session.state,
            pricing=session.pricing(),
            order_id=str(session.order_id) if session.order_id else None,
            payment_intent_id=session.payment_intent_id,
            client_secret=session.client_secret,
            error=session.last_error,
        )

    # -------------------------------------------------------------------
    # Stage 1: delivery details → order → payment intent
    # -------------------------------------------------------------------
    def submit_details(self, session_id, details: DeliveryDetails, client_total=None) -> CheckoutProgress:
        """Place (or reuse) the order for the cart and open a payment intent for it.

        Validation failures leave the session in DETAILS with the error
        recorded; any failure while opening the payment intent moves it to
        FAILED. Either way the error is re-raised.
        """
        session = self._session(session_id)
        state = CheckoutState(session.state)
        if state == CheckoutState.SUCCESS:
            raise ValidationError({"state": ["Checkout is already complete"]})
        if state != CheckoutState.DETAILS:
            self._process(ReturnToDetails(session_id=str(session.id)))
            session = self._session(session_id)

        address = details.full_address()
        fingerprint = session.fingerprint(address)

        try:
            if not session.items:
                raise EmptyOrder("Your cart is empty")
            order_id = self._reusable_order_id(session, fingerprint)
            if order_id is None:
                self._supersede_open_order(session)
                order_id = self._process(
                    PlaceOrder(
                        customer_id=str(session.customer_id),
                        shop_id=str(session.shop_id),
                        items=json.dumps(
                            [{"food_item_id": str(line.food_item_id), "quantity": line.quantity} for line in session.items]
                        ),
                        address=address,
                        total_amount=client_total,
                    )
                )
        except ValidationError as exc:
            self._process(RecordCheckoutError(session_id=str(session.id), message=error_message(exc)))
            logger.info("Checkout details rejected", session_id=str(session.id), error=error_message(exc))
            raise

        self._process(
            RecordCheckoutOrder(
                session_id=str(session.id),
                order_id=order_id,
                fingerprint=fingerprint,
                delivery_address=address,
            )
        )

        # The session is now PAYMENT_INTENT_PENDING, which only moves forward or to
        # FAILED, so every error from this step must fail the session.
        try:
            intent = self._process(CreatePaymentIntent(order_id=order_id))
        except Exception as exc:
            reason = error_message(exc) if isinstance(exc, ValidationError) else "Payment setup failed"
            self._process(FailCheckout(session_id=str(session.id), reason=reason))
            logger.warning(
                "Checkout payment setup failed",
                session_id=str(session.id),
                order_id=order_id,
                error=str(exc),
            )
            raise

        self._process(
            RecordCheckoutPayment(
                session_id=str(session.id),
                payment_intent_id=intent["payment_intent_id"],
                client_secret=intent["client_secret"],
            )
        )
        return self.progress(session_id)

    def _reusable_order_id(self, session, fingerprint):
        """The session's existing order, if the cart and address are unchanged and it is still open."""
        if not session.order_id or session.order_fingerprint != fingerprint:
            return None
        order = current_domain.repository_for(Order).find_by_id(session.order_id)
        if order is None or not order.is_open:
            return None
        logger.info("Reusing checkout order", session_id=str(session.id), order_id=str(order.id))
        return str(order.id)

    def _supersede_open_order(self, session):
        """Cancel the session's previous order (and its open intents) before placing a new one."""
        if not session.order_id:
            return
        order = current_domain.repository_for(Order).find_by_id(session.order_id)
        if order is None or not order.is_open:
            return

        for intent in current_domain.repository_for(PaymentIntent).find_by_order(order.id):
            if intent.is_open:
                self._process(CancelPaymentIntent(payment_intent_id=str(intent.id)))
        self._process(CancelOrder(order_id=str(order.id), reason="Superseded by a new checkout attempt"))
        logger.info("Superseded checkout order", session_id=str(session.id), order_id=str(order.id))

    # -------------------------------------------------------------------
    # Stage 2: payment capture → success
    # -------------------------------------------------------------------
    def complete_payment(self, session_id, payment_intent_id=None) -> CheckoutProgress:
        """Confirm payment with the provider and finish checkout exactly once."""
        session = self._session(session_id)
        if session.is_completed:
            return self.progress(session_id)

        if CheckoutState(session.state) != CheckoutState.PAYMENT_IN_PROGRESS:
            raise ValidationError({"state": [f"Checkout is not awaiting payment (state: {session.state})"]})

        intent_id = payment_intent_id or session.payment_intent_id
        try:
            if intent_id != session.payment_intent_id:
                raise PaymentNotConfirmed("Payment intent does not belong to this checkout")
            self._process(ConfirmPayment(order_id=str(session.order_id), payment_intent_id=intent_id))
        except ValidationError as exc:
            self._process(FailCheckout(session_id=str(session.id), reason=error_message(exc)))
            raise

        self._process(CompleteCheckout(session_id=str(session.id)))
        logger.info("Checkout completed", session_id=str(session.id), order_id=str(session.order_id))
        return self.progress(session_id)

    def go_back(self, session_id) -> CheckoutProgress:
        """Return from the payment stage to delivery details, keeping the order and intent."""
        self._process(ReturnToDetails(session_id=str(session_id)))
        return self.progress(session_id)
