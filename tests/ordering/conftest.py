import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Reset storage and the payment gateway after every test."""
    yield

    from ordering.payment.gateway import reset_gateway
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()
    reset_gateway()


@pytest.fixture()
def gateway():
    from ordering.payment.gateway import set_gateway
    from ordering.payment.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def catalog():
    """A customer, two shops and their menus, registered through the directory commands."""
    from ordering.directory.registration import AddFoodItem, RegisterShop, RegisterUser
    from protean import current_domain

    def process(command):
        return current_domain.process(command, asynchronous=False)

    customer_id = process(RegisterUser(name="Asha Rao", email="asha@example.com"))
    owner_id = process(RegisterUser(name="Vikram Shah", email="vikram@example.com", user_type="shop_owner"))
    shop_id = process(RegisterShop(name="Spice Route", owner_id=owner_id))
    other_shop_id = process(RegisterShop(name="Dosa Corner", owner_id=owner_id))

    return {
        "customer_id": customer_id,
        "owner_id": owner_id,
        "shop_id": shop_id,
        "other_shop_id": other_shop_id,
        "biryani_id": process(AddFoodItem(shop_id=shop_id, name="Chicken Biryani", price=50.0)),
        "paneer_id": process(AddFoodItem(shop_id=shop_id, name="Paneer Tikka", price=125.0)),
        "dosa_id": process(AddFoodItem(shop_id=other_shop_id, name="Masala Dosa", price=40.0)),
    }
