"""CheckoutSession aggregate (CQRS) — one customer's cart and checkout stage.

The session owns the cart so that it survives page reloads and cannot leak
between customers. A cart holds food items from a single shop. Checkout
moves through two stages, delivery details and payment:

    DETAILS → PAYMENT_INTENT_PENDING → PAYMENT_IN_PROGRESS → SUCCESS
    FAILED is reachable from any non-terminal state; retry returns to DETAILS.
    PAYMENT_IN_PROGRESS → DETAILS is the back button; the order and intent
    are kept so a resubmission can reuse them.

The cart can only change while in DETAILS or FAILED, so the order a customer
pays for is exactly the cart they saw.
"""

import hashlib
import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.checkout.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityChanged,
    CheckoutCompleted,
    CheckoutFailed,
    CheckoutOpened,
    CheckoutOrderPlaced,
    CheckoutPaymentStarted,
)
from ordering.domain import ordering
from ordering.errors import CartShopConflict
from ordering.pricing.calculator import calculate_pricing, subtotal_of


class CheckoutState(Enum):
    DETAILS = "details"
    PAYMENT_INTENT_PENDING = "payment_intent_pending"
    PAYMENT_IN_PROGRESS = "payment_in_progress"
    SUCCESS = "success"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    CheckoutState.DETAILS: {CheckoutState.PAYMENT_INTENT_PENDING, CheckoutState.FAILED},
    CheckoutState.PAYMENT_INTENT_PENDING: {CheckoutState.PAYMENT_IN_PROGRESS, CheckoutState.FAILED},
    CheckoutState.PAYMENT_IN_PROGRESS: {
        CheckoutState.SUCCESS,
        CheckoutState.DETAILS,  # Back navigation
        CheckoutState.FAILED,
    },
    CheckoutState.FAILED: {CheckoutState.DETAILS},
    CheckoutState.SUCCESS: set(),  # Terminal
}

_EDITABLE_STATES = {CheckoutState.DETAILS, CheckoutState.FAILED}


@ordering.entity(part_of="CheckoutSession")
class CartLine:
    food_item_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@ordering.aggregate
class CheckoutSession:
    customer_id = Identifier(required=True)
    shop_id = Identifier()  # Empty cart has no shop
    items = HasMany(CartLine)
    state = String(choices=CheckoutState, default=CheckoutState.DETAILS.value)
    order_id = Identifier()
    order_fingerprint = String(max_length=64)
    delivery_address = Text()
    payment_intent_id = String(max_length=255)
    client_secret = String(max_length=255)
    last_error = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, customer_id):
        now = datetime.now(UTC)
        session = cls(
            customer_id=customer_id,
            state=CheckoutState.DETAILS.value,
            created_at=now,
            updated_at=now,
        )
        session.raise_(
            CheckoutOpened(
                session_id=str(session.id),
                customer_id=str(customer_id),
                opened_at=now,
            )
        )
        return session

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_state):
        current = CheckoutState(self.state)
        if target_state not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"state": [f"Cannot move checkout from {current.value} to {target_state.value}"]})

    def _move_to(self, target_state):
        self._assert_can_transition(target_state)
        previous = self.state
        self.state = target_state.value
        self.updated_at = datetime.now(UTC)
        return previous

    def _assert_cart_editable(self):
        if CheckoutState(self.state) not in _EDITABLE_STATES:
            raise ValidationError({"state": [f"The cart cannot be changed while checkout is in {self.state}"]})

    def _line(self, food_item_id):
        return next((line for line in self.items if str(line.food_item_id) == str(food_item_id)), None)

    def _drop_lines(self, lines):
        for line in list(lines):
            self.remove_items(line)
        if not self.items:
            self.shop_id = None

    @property
    def is_completed(self):
        return self.state == CheckoutState.SUCCESS.value

    @property
    def item_count(self):
        return sum(line.quantity for line in self.items)

    def subtotal(self):
        return subtotal_of(self.items)

    def pricing(self, policy=None):
        return calculate_pricing(self.subtotal(), policy)

    def fingerprint(self, delivery_address):
        """Digest of cart contents and address, used to detect an unchanged resubmission."""
        payload = {
            "shop_id": str(self.shop_id),
            "lines": sorted([str(line.food_item_id), line.quantity, line.unit_price] for line in self.items),
            "address": delivery_address,
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_item(self, food_item_id, shop_id, name, unit_price, quantity=1):
        """Add a food item, or increase its quantity when it is already in the cart."""
        self._assert_cart_editable()
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.items and self.shop_id and str(self.shop_id) != str(shop_id):
            raise CartShopConflict("Your cart contains items from another shop. Clear the cart to order from here.")

        existing = self._line(food_item_id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(
                CartLine(
                    food_item_id=food_item_id,
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                )
            )
        self.shop_id = shop_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                session_id=str(self.id),
                shop_id=str(shop_id),
                food_item_id=str(food_item_id),
                unit_price=unit_price,
                quantity=quantity,
            )
        )

    def update_quantity(self, food_item_id, quantity):
        """Set a line's quantity; zero or less removes the line."""
        self._assert_cart_editable()
        line = self._line(food_item_id)
        if line is None:
            raise ValidationError({"food_item_id": ["Item not found in cart"]})

        if quantity <= 0:
            self.remove_item(food_item_id)
            return

        previous = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartQuantityChanged(
                session_id=str(self.id),
                food_item_id=str(food_item_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, food_item_id):
        self._assert_cart_editable()
        line = self._line(food_item_id)
        if line is None:
            raise ValidationError({"food_item_id": ["Item not found in cart"]})

        self._drop_lines([line])
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(session_id=str(self.id), food_item_id=str(food_item_id)))

    def clear_cart(self):
        self._assert_cart_editable()
        self._drop_lines(self.items)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(session_id=str(self.id)))

    # -------------------------------------------------------------------
    # Checkout stages
    # -------------------------------------------------------------------
    def record_order_placed(self, order_id, fingerprint, delivery_address):
        self._move_to(CheckoutState.PAYMENT_INTENT_PENDING)
        self.order_id = order_id
        self.order_fingerprint = fingerprint
        self.delivery_address = delivery_address
        self.last_error = None
        self.raise_(CheckoutOrderPlaced(session_id=str(self.id), order_id=str(order_id)))

    def record_payment_started(self, payment_intent_id, client_secret):
        self._move_to(CheckoutState.PAYMENT_IN_PROGRESS)
        self.payment_intent_id = payment_intent_id
        self.client_secret = client_secret
        self.raise_(
            CheckoutPaymentStarted(
                session_id=str(self.id),
                order_id=str(self.order_id),
                payment_intent_id=payment_intent_id,
            )
        )

    def complete(self):
        """Finish checkout and empty the cart. Returns False if already completed."""
        if self.is_completed:
            return False

        self._move_to(CheckoutState.SUCCESS)
        self._drop_lines(self.items)
        self.completed_at = self.updated_at
        self.last_error = None
        self.raise_(
            CheckoutCompleted(
                session_id=str(self.id),
                customer_id=str(self.customer_id),
                order_id=str(self.order_id),
                completed_at=self.completed_at,
            )
        )
        return True

    def fail(self, reason):
        """Surface an error; the cart is kept so the customer can retry."""
        previous = self._move_to(CheckoutState.FAILED)
        self.last_error = reason[:500]
        self.raise_(CheckoutFailed(session_id=str(self.id), previous_state=previous, reason=self.last_error))

    def return_to_details(self):
        self._move_to(CheckoutState.DETAILS)

    def record_error(self, message):
        self.last_error = message[:500]
        self.updated_at = datetime.now(UTC)
