"""Order status scenarios driven through domain commands."""

import json
from datetime import UTC, datetime, timedelta

from ordering.errors import OrderVersionConflict
from ordering.order.creation import PlaceOrder
from ordering.order.order import Order
from ordering.order.reconciliation import ExpireUnpaidOrders
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_status.feature")


def process(command):
    return current_domain.process(command, asynchronous=False)


@given(parsers.cfparse('the customer placed an order for {quantity:d} "{item_name}"'))
def _(scenario_state, quantity, item_name):
    scenario_state["order_id"] = process(
        PlaceOrder(
            customer_id=scenario_state["customer_id"],
            shop_id=scenario_state["shop_id"],
            items=json.dumps([{"food_item_id": scenario_state["menu"][item_name], "quantity": quantity}]),
            address="221B Residency Road, Bengaluru 560025. Phone: 9876543210",
        )
    )


@when(parsers.cfparse('the shop sets the order to "{status}" at version {version:d}'))
def _(scenario_state, status, version):
    try:
        process(UpdateOrderStatus(order_id=scenario_state["order_id"], status=status, version=version))
    except ValidationError as exc:
        scenario_state["error"] = exc


@when(parsers.cfparse("unpaid orders are swept {minutes:d} minutes from now"))
def _(scenario_state, minutes):
    as_of = datetime.now(UTC) + timedelta(minutes=minutes)
    scenario_state["expired"] = process(ExpireUnpaidOrders(as_of=as_of))


@then(parsers.cfparse("the order version is {version:d}"))
def _(scenario_state, version):
    assert current_domain.repository_for(Order).get(scenario_state["order_id"]).version == version


@then("the update is rejected as a version conflict")
def _(scenario_state):
    assert isinstance(scenario_state["error"], OrderVersionConflict)


@then("the update is rejected as an invalid transition")
def _(scenario_state):
    error = scenario_state["error"]
    assert isinstance(error, ValidationError)
    assert not isinstance(error, OrderVersionConflict)
    assert "Cannot transition" in str(error.messages)
