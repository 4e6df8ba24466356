"""Checkout scenarios driven through the orchestrator."""

from ordering.checkout.cart import AddCartItem, OpenCheckout
from ordering.checkout.details import DeliveryDetails
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.checkout.session import CheckoutSession
from ordering.order.order import Order
from ordering.payment.intent import PaymentIntent
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/checkout.feature")

DETAILS = DeliveryDetails(
    address="221B Residency Road",
    city="Bengaluru",
    zip_code="560025",
    phone_number="9876543210",
)


def process(command):
    return current_domain.process(command, asynchronous=False)


def _session(scenario_state):
    return current_domain.repository_for(CheckoutSession).get(scenario_state["session_id"])


# ---------------------------------------------------------------------------
# Given
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the customer has {quantity:d} "{item_name}" in the cart'))
def _(scenario_state, quantity, item_name):
    session_id = process(OpenCheckout(customer_id=scenario_state["customer_id"]))
    process(AddCartItem(session_id=session_id, food_item_id=scenario_state["menu"][item_name], quantity=quantity))
    scenario_state["session_id"] = session_id


@given("the payment provider declines intents")
def _(scenario_state):
    scenario_state["gateway"].configure(should_succeed=False, failure_reason="Card declined")


# ---------------------------------------------------------------------------
# When
# ---------------------------------------------------------------------------
@when("the payment provider accepts intents")
def _(scenario_state):
    scenario_state["gateway"].configure(should_succeed=True)


@when("the customer submits delivery details")
def _(scenario_state):
    try:
        progress = CheckoutOrchestrator().submit_details(scenario_state["session_id"], DETAILS)
    except ValidationError as exc:
        scenario_state["error"] = exc
        return
    scenario_state["order_id"] = progress.order_id
    scenario_state["payment_intent_id"] = progress.payment_intent_id


@when("the provider captures the payment")
def _(scenario_state):
    scenario_state["gateway"].capture(scenario_state["payment_intent_id"])


@when("the customer completes payment")
def _(scenario_state):
    try:
        CheckoutOrchestrator().complete_payment(scenario_state["session_id"])
    except ValidationError as exc:
        scenario_state["error"] = exc


# ---------------------------------------------------------------------------
# Then
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the checkout is in state "{state}"'))
def _(scenario_state, state):
    assert _session(scenario_state).state == state


@then(parsers.cfparse('the checkout error is "{message}"'))
def _(scenario_state, message):
    assert _session(scenario_state).last_error == message


@then(parsers.cfparse("the amount due is {amount:d} minor units"))
def _(scenario_state, amount):
    intent = current_domain.repository_for(PaymentIntent).get(scenario_state["payment_intent_id"])
    assert intent.amount == amount


@then("the cart is empty")
def _(scenario_state):
    assert _session(scenario_state).items == []


@then(parsers.cfparse("the customer has {count:d} order"))
def _(scenario_state, count):
    assert len(current_domain.repository_for(Order).find_by_customer(scenario_state["customer_id"])) == count


@then(parsers.cfparse("the provider was asked about the payment {count:d} time"))
def _(scenario_state, count):
    assert len(scenario_state["gateway"].calls_to("retrieve_intent")) == count


@then(parsers.cfparse("the cart total is {total:f}"))
def _(scenario_state, total):
    assert _session(scenario_state).pricing().total == total
