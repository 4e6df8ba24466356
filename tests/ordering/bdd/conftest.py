"""Shared steps for ordering BDD scenarios."""

import pytest
from ordering.directory.registration import AddFoodItem, RegisterShop, RegisterUser
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def scenario_state(gateway):
    """Mutable scratchpad shared by the steps of one scenario."""
    return {"gateway": gateway, "menu": {}, "error": None}


@given(parsers.cfparse('a shop "{shop_name}" selling "{item_name}" at {price:f}'))
def _(scenario_state, shop_name, item_name, price):
    owner_id = process(RegisterUser(name=f"{shop_name} Owner", email="owner@example.com", user_type="shop_owner"))
    shop_id = process(RegisterShop(name=shop_name, owner_id=owner_id))
    scenario_state["shop_id"] = shop_id
    scenario_state["menu"][item_name] = process(AddFoodItem(shop_id=shop_id, name=item_name, price=price))


@given(parsers.cfparse('a customer "{name}"'))
def _(scenario_state, name):
    email = name.lower().replace(" ", ".") + "@example.com"
    scenario_state["customer_id"] = process(RegisterUser(name=name, email=email))


@then(parsers.cfparse('the order is "{status}"'))
def _(scenario_state, status):
    order = current_domain.repository_for(Order).get(scenario_state["order_id"])
    assert order.status == status
