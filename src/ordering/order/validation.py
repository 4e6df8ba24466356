"""Referential validation of an order request before anything is written.

Checks run in a fixed order and stop at the first failure:

1. identifier format for the customer, shop and every food item;
2. the customer exists;
3. the shop exists;
4. per line, the food item exists and belongs to the shop.

Client-supplied prices are never read: each line is re-priced from the
catalog as ``unit_price * quantity``.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.directory.customer import Customer
from ordering.directory.shop import FoodItem, Shop
from ordering.errors import (
    CustomerNotFound,
    EmptyOrder,
    FoodItemNotFound,
    InvalidIdentifier,
    ItemShopMismatch,
    ShopNotFound,
)


@dataclass(frozen=True)
class ValidatedLine:
    food_item_id: str
    name: str
    unit_price: float
    quantity: int
    price: float


@dataclass(frozen=True)
class ValidatedOrder:
    customer_id: str
    shop_id: str
    lines: tuple[ValidatedLine, ...]

    @property
    def subtotal(self) -> float:
        return float(sum(Decimal(str(line.price)) for line in self.lines))


def is_valid_identifier(value) -> bool:
    """True for the canonical hyphenated UUID form that aggregate ids use."""
    if value is None:
        return False
    try:
        parsed = UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return False
    return str(parsed) == str(value).lower()


def _line_parts(line):
    if isinstance(line, dict):
        return line.get("food_item_id"), line.get("quantity")
    return line[0], line[1]


class OrderValidator:
    """Validates customer, shop and line references against the directory.

    Repositories default to the active domain's; tests and callers can pass
    anything exposing ``find_by_id``.
    """

    def __init__(self, customers=None, shops=None, food_items=None):
        self._customers = customers
        self._shops = shops
        self._food_items = food_items

    @property
    def customers(self):
        return self._customers or current_domain.repository_for(Customer)

    @property
    def shops(self):
        return self._shops or current_domain.repository_for(Shop)

    @property
    def food_items(self):
        return self._food_items or current_domain.repository_for(FoodItem)

    def validate(self, customer_id, shop_id, items) -> ValidatedOrder:
        """Validate an order request.

        Args:
            customer_id: Identifier of the ordering customer.
            shop_id: Identifier of the target shop.
            items: Iterable of ``{"food_item_id", "quantity"}`` dicts or
                   ``(food_item_id, quantity)`` pairs.
        """
        requested = [_line_parts(line) for line in items or []]
        if not requested:
            raise EmptyOrder("Order must contain at least one item")

        self._check_formats(customer_id, shop_id, requested)

        if self.customers.find_by_id(customer_id) is None:
            raise CustomerNotFound("Customer not found")
        if self.shops.find_by_id(shop_id) is None:
            raise ShopNotFound("Shop not found")

        lines = []
        for food_item_id, quantity in requested:
            food_item = self.food_items.find_by_id(food_item_id)
            if food_item is None:
                raise FoodItemNotFound(f"Food item not found: {food_item_id}")
            if str(food_item.shop_id) != str(shop_id):
                raise ItemShopMismatch(f"Food item {food_item_id} does not belong to the selected shop")

            unit_price = Decimal(str(food_item.price))
            lines.append(
                ValidatedLine(
                    food_item_id=str(food_item.id),
                    name=food_item.name,
                    unit_price=float(unit_price),
                    quantity=int(quantity),
                    price=float(unit_price * int(quantity)),
                )
            )

        return ValidatedOrder(customer_id=str(customer_id), shop_id=str(shop_id), lines=tuple(lines))

    def _check_formats(self, customer_id, shop_id, requested):
        if not is_valid_identifier(customer_id):
            raise InvalidIdentifier("Invalid customer ID format", field="customer_id")
        if not is_valid_identifier(shop_id):
            raise InvalidIdentifier("Invalid shop ID format", field="shop_id")
        for food_item_id, quantity in requested:
            if not is_valid_identifier(food_item_id):
                raise InvalidIdentifier(f"Invalid food item ID format: {food_item_id}", field="items")
            if quantity is None or int(quantity) < 1:
                raise ValidationError({"items": ["Quantity must be at least 1"]})
