"""Tests for OrderValidator check ordering and server-side line pricing.

Uses in-memory stand-ins for the directory repositories so that the
validator's fail-fast order can be observed without a provider.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest
from ordering.errors import (
    CustomerNotFound,
    EmptyOrder,
    FoodItemNotFound,
    InvalidIdentifier,
    ItemShopMismatch,
    ShopNotFound,
)
from ordering.order.validation import OrderValidator, is_valid_identifier
from protean.exceptions import ValidationError


class _Lookup:
    """Minimal repository stand-in that records every lookup."""

    def __init__(self, records=()):
        self.records = {str(r.id): r for r in records}
        self.lookups = []

    def find_by_id(self, identifier):
        self.lookups.append(str(identifier))
        return self.records.get(str(identifier))


@pytest.fixture
def directory():
    customer = SimpleNamespace(id=str(uuid4()))
    shop = SimpleNamespace(id=str(uuid4()))
    other_shop = SimpleNamespace(id=str(uuid4()))
    biryani = SimpleNamespace(id=str(uuid4()), shop_id=shop.id, name="Chicken Biryani", price=50.0)
    dosa = SimpleNamespace(id=str(uuid4()), shop_id=other_shop.id, name="Masala Dosa", price=40.0)
    return SimpleNamespace(
        customer=customer,
        shop=shop,
        biryani=biryani,
        dosa=dosa,
        customers=_Lookup([customer]),
        shops=_Lookup([shop, other_shop]),
        food_items=_Lookup([biryani, dosa]),
    )


@pytest.fixture
def validator(directory):
    return OrderValidator(
        customers=directory.customers,
        shops=directory.shops,
        food_items=directory.food_items,
    )


class TestIdentifierFormat:
    def test_uuid_is_valid(self):
        assert is_valid_identifier(str(uuid4()))

    @pytest.mark.parametrize("value", [None, "", "abc", "12345", "not-a-uuid-at-all"])
    def test_invalid_values(self, value):
        assert not is_valid_identifier(value)

    @pytest.mark.parametrize(
        "value",
        [
            "0b9e1f3a5c7d4e2f8a6b9c0d1e2f3a4b",
            "{0b9e1f3a-5c7d-4e2f-8a6b-9c0d1e2f3a4b}",
            "urn:uuid:0b9e1f3a-5c7d-4e2f-8a6b-9c0d1e2f3a4b",
        ],
    )
    def test_non_canonical_uuid_forms_are_invalid(self, value):
        assert not is_valid_identifier(value)


class TestValidation:
    def test_valid_order_is_priced_from_catalog(self, directory, validator):
        result = validator.validate(
            directory.customer.id,
            directory.shop.id,
            [{"food_item_id": directory.biryani.id, "quantity": 2, "price": 0.01}],
        )
        assert len(result.lines) == 1
        line = result.lines[0]
        assert line.unit_price == 50.0
        assert line.price == 100.0
        assert line.name == "Chicken Biryani"
        assert result.subtotal == 100.0

    def test_accepts_pairs(self, directory, validator):
        result = validator.validate(directory.customer.id, directory.shop.id, [(directory.biryani.id, 1)])
        assert result.subtotal == 50.0

    def test_empty_items_rejected(self, directory, validator):
        with pytest.raises(EmptyOrder):
            validator.validate(directory.customer.id, directory.shop.id, [])

    def test_malformed_customer_id(self, directory, validator):
        with pytest.raises(InvalidIdentifier) as exc:
            validator.validate("cust-1", directory.shop.id, [(directory.biryani.id, 1)])
        assert exc.value.field == "customer_id"

    def test_unhyphenated_customer_id_is_malformed_not_missing(self, directory, validator):
        with pytest.raises(InvalidIdentifier) as exc:
            validator.validate(directory.customer.id.replace("-", ""), directory.shop.id, [(directory.biryani.id, 1)])
        assert exc.value.field == "customer_id"
        assert directory.customers.lookups == []

    def test_malformed_item_id_reported_before_lookups(self, directory, validator):
        with pytest.raises(InvalidIdentifier):
            validator.validate(directory.customer.id, directory.shop.id, [("bad-item", 1)])
        assert directory.customers.lookups == []

    def test_quantity_below_one_rejected(self, directory, validator):
        with pytest.raises(ValidationError):
            validator.validate(directory.customer.id, directory.shop.id, [(directory.biryani.id, 0)])

    def test_unknown_customer_checked_before_shop(self, directory, validator):
        with pytest.raises(CustomerNotFound):
            validator.validate(str(uuid4()), str(uuid4()), [(str(uuid4()), 1)])
        assert directory.shops.lookups == []

    def test_unknown_shop(self, directory, validator):
        with pytest.raises(ShopNotFound):
            validator.validate(directory.customer.id, str(uuid4()), [(directory.biryani.id, 1)])
        assert directory.food_items.lookups == []

    def test_unknown_food_item(self, directory, validator):
        missing = str(uuid4())
        with pytest.raises(FoodItemNotFound) as exc:
            validator.validate(directory.customer.id, directory.shop.id, [(missing, 1)])
        assert missing in exc.value.message

    def test_item_from_another_shop(self, directory, validator):
        with pytest.raises(ItemShopMismatch):
            validator.validate(
                directory.customer.id,
                directory.shop.id,
                [(directory.biryani.id, 1), (directory.dosa.id, 1)],
            )

    def test_stops_at_first_bad_line(self, directory, validator):
        with pytest.raises(FoodItemNotFound):
            validator.validate(
                directory.customer.id,
                directory.shop.id,
                [(str(uuid4()), 1), (directory.biryani.id, 1)],
            )
        assert len(directory.food_items.lookups) == 1
