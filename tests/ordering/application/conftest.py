import json

import pytest
from ordering.checkout.details import DeliveryDetails
from ordering.order.creation import PlaceOrder
from protean import current_domain

ADDRESS = "221B Residency Road, Bengaluru 560025. Phone: 9876543210"


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def place_order(catalog):
    """Place an order for the catalog customer at Spice Route and return its id."""

    def _place(lines=None, total_amount=None, **overrides):
        lines = lines or [{"food_item_id": catalog["biryani_id"], "quantity": 2}]
        kwargs = {
            "customer_id": catalog["customer_id"],
            "shop_id": catalog["shop_id"],
            "items": json.dumps(lines),
            "address": ADDRESS,
            "total_amount": total_amount,
        }
        kwargs.update(overrides)
        return process(PlaceOrder(**kwargs))

    return _place


@pytest.fixture()
def details():
    return DeliveryDetails(
        address="221B Residency Road",
        city="Bengaluru",
        zip_code="560025",
        phone_number="9876543210",
    )
