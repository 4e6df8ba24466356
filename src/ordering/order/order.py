"""Order aggregate (CQRS) — a priced food order for one customer from one shop.

Items and pricing are captured when the order is placed and never change
afterwards; only the status, payment linkage and cancellation reason move.
Every status change bumps ``version`` so that callers updating status must
prove they saw the latest state.

State Machine:
    PENDING → PAYMENT_PENDING → CONFIRMED → PREPARING → READY → DELIVERED
    PENDING → CONFIRMED (manual confirmation, e.g. cash on delivery)
    CANCELLED (from any state before READY)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import OrderVersionConflict, PaymentNotConfirmed
from ordering.order.events import (
    OrderCancelled,
    OrderPaymentConfirmed,
    OrderPaymentPending,
    OrderPlaced,
    OrderStatusChanged,
)
from ordering.pricing.calculator import to_minor_units


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAYMENT_PENDING = "payment_pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PAYMENT_PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PAYMENT_PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Orders still waiting on payment; the checkout may reuse or supersede them
OPEN_STATUSES = {OrderStatus.PENDING, OrderStatus.PAYMENT_PENDING}

ACTIVE_STATUSES = OPEN_STATUSES | {
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
}

# Only the payment workflow may move an order into PAYMENT_PENDING
_WORKFLOW_ONLY_STATUSES = {OrderStatus.PAYMENT_PENDING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class OrderPricing:
    """Pricing breakdown locked at order time."""

    subtotal = Float(default=0.0)
    discount = Float(default=0.0)
    taxable = Float(default=0.0)
    tax = Float(default=0.0)
    delivery_fee = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="INR")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """One food item line. ``price`` is ``unit_price * quantity`` as charged."""

    food_item_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    address = Text(required=True)
    applied_offer_id = Identifier()
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    version = Integer(default=1, min_value=1)
    payment_intent_id = String(max_length=255)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def total_must_match_pricing(self):
        if self.pricing and round(self.pricing.total - self.total_amount, 2) != 0:
            raise ValidationError({"total_amount": ["Order total must equal the priced total"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        shop_id,
        lines,
        breakdown,
        address,
        currency="INR",
        applied_offer_id=None,
    ):
        """Create a pending order from validated lines and a server-side breakdown.

        Args:
            customer_id: The ordering customer.
            shop_id: The shop every line belongs to.
            lines: Validated lines with food_item_id, name, unit_price,
                   quantity and price.
            breakdown: The ``PricingBreakdown`` computed from those lines.
            address: Delivery address as a single line of text.
        """
        now = datetime.now(UTC)
        currency = (currency or "INR").upper()

        order = cls(
            customer_id=customer_id,
            shop_id=shop_id,
            items=[
                OrderItem(
                    food_item_id=line.food_item_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    price=line.price,
                )
                for line in lines
            ],
            pricing=OrderPricing(
                subtotal=breakdown.subtotal,
                discount=breakdown.discount,
                taxable=breakdown.taxable,
                tax=breakdown.tax,
                delivery_fee=breakdown.delivery_fee,
                total=breakdown.total,
                currency=currency,
            ),
            total_amount=breakdown.total,
            currency=currency,
            address=address,
            applied_offer_id=applied_offer_id,
            status=OrderStatus.PENDING.value,
            version=1,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                shop_id=str(shop_id),
                items=json.dumps(
                    [
                        {
                            "food_item_id": str(item.food_item_id),
                            "name": item.name,
                            "unit_price": item.unit_price,
                            "quantity": item.quantity,
                            "price": item.price,
                        }
                        for item in order.items
                    ]
                ),
                subtotal=breakdown.subtotal,
                discount=breakdown.discount,
                tax=breakdown.tax,
                delivery_fee=breakdown.delivery_fee,
                total_amount=breakdown.total,
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_open(self):
        return OrderStatus(self.status) in OPEN_STATUSES

    @property
    def amount_minor(self):
        return to_minor_units(self.total_amount)

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _move_to(self, target_status):
        """Apply a checked transition and bump the version. Returns the previous status."""
        self._assert_can_transition(target_status)
        previous = self.status
        self.status = target_status.value
        self.version = (self.version or 1) + 1
        self.updated_at = datetime.now(UTC)
        return previous

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, status, expected_version):
        """Move to ``status`` if the caller saw the current ``version``."""
        if expected_version is not None and int(expected_version) != self.version:
            raise OrderVersionConflict(
                f"Order was modified concurrently (expected version {expected_version}, current {self.version})"
            )

        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status '{status}'"]}) from None

        if target in _WORKFLOW_ONLY_STATUSES:
            raise ValidationError({"status": [f"Status {target.value} is set by the payment workflow only"]})

        if target == OrderStatus.CANCELLED:
            self.cancel("Cancelled by shop")
            return

        previous = self._move_to(target)
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=self.status,
                version=self.version,
                changed_at=self.updated_at,
            )
        )

    def record_payment_pending(self, payment_intent_id):
        """Link a payment intent. Re-linking the same intent is a no-op."""
        current = OrderStatus(self.status)
        if current == OrderStatus.PAYMENT_PENDING:
            if self.payment_intent_id == payment_intent_id:
                return
            # A replacement intent after a failed attempt
            self.payment_intent_id = payment_intent_id
            self.version += 1
            self.updated_at = datetime.now(UTC)
        else:
            self._move_to(OrderStatus.PAYMENT_PENDING)
            self.payment_intent_id = payment_intent_id

        self.raise_(
            OrderPaymentPending(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                amount=self.total_amount,
                currency=self.currency,
            )
        )

    def confirm_payment(self, payment_intent_id, amount_received):
        """Confirm the order once the provider captured ``amount_received`` minor units.

        Returns False when the order was already confirmed by this intent.
        """
        if OrderStatus(self.status) == OrderStatus.CONFIRMED and self.payment_intent_id == payment_intent_id:
            return False

        if self.payment_intent_id and self.payment_intent_id != payment_intent_id:
            raise PaymentNotConfirmed("Payment intent does not belong to this order")
        if int(amount_received) != self.amount_minor:
            raise PaymentNotConfirmed(
                f"Captured amount {amount_received} does not match order amount {self.amount_minor}"
            )

        self._move_to(OrderStatus.CONFIRMED)
        self.payment_intent_id = payment_intent_id
        self.raise_(
            OrderPaymentConfirmed(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                amount=self.total_amount,
                confirmed_at=self.updated_at,
            )
        )
        return True

    def cancel(self, reason):
        previous = self._move_to(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous,
                reason=reason,
                cancelled_at=self.updated_at,
            )
        )
