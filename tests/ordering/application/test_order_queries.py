"""Tests for order read queries, including the per-row ownership re-check."""

import pytest
from ordering.directory.registration import RegisterUser
from ordering.order.order import Order
from ordering.order.queries import get_all_orders, get_order, get_order_history, get_shop_orders, get_user_orders
from ordering.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


def process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def second_customer_id():
    return process(RegisterUser(name="Rahul Menon", email="rahul@example.com"))


class TestOrderQueries:
    def test_get_order(self, place_order):
        order_id = place_order()
        assert str(get_order(order_id).id) == order_id

    def test_get_missing_order(self):
        with pytest.raises(ObjectNotFoundError):
            get_order("0b9e1f3a-5c7d-4e2f-8a6b-9c0d1e2f3a4b")

    def test_user_orders_newest_first(self, catalog, place_order):
        first = place_order()
        second = place_order(lines=[{"food_item_id": catalog["paneer_id"], "quantity": 1}])

        orders = get_user_orders(catalog["customer_id"])
        assert [str(o.id) for o in orders] == [second, first]

    def test_user_orders_only_for_that_customer(self, catalog, place_order, second_customer_id):
        place_order()
        place_order(customer_id=second_customer_id)

        assert len(get_user_orders(catalog["customer_id"])) == 1
        assert len(get_user_orders(second_customer_id)) == 1

    def test_shop_orders(self, catalog, place_order, second_customer_id):
        place_order()
        place_order(customer_id=second_customer_id)

        assert len(get_shop_orders(catalog["shop_id"])) == 2
        assert get_shop_orders(catalog["other_shop_id"]) == []

    def test_all_orders_across_customers_newest_first(self, catalog, place_order, second_customer_id):
        first = place_order()
        second = place_order(customer_id=second_customer_id)

        assert [str(o.id) for o in get_all_orders()] == [second, first]

    def test_all_orders_empty(self):
        assert get_all_orders() == []

    def test_rows_from_a_leaky_filter_are_dropped(self, monkeypatch, catalog, place_order, second_customer_id):
        mine = place_order()
        place_order(customer_id=second_customer_id)

        def leaky_find_by_customer(self, customer_id):
            return self._dao.query.all().items

        repo_cls = type(current_domain.repository_for(Order))
        monkeypatch.setattr(repo_cls, "find_by_customer", leaky_find_by_customer)

        orders = get_user_orders(catalog["customer_id"])
        assert [str(o.id) for o in orders] == [mine]


class TestOrderHistory:
    def test_groups_by_status(self, catalog, place_order):
        active = place_order()
        delivered = place_order()
        cancelled = place_order()

        version = 1
        for status in ("confirmed", "preparing", "ready", "delivered"):
            version = process(UpdateOrderStatus(order_id=delivered, status=status, version=version))
        process(UpdateOrderStatus(order_id=cancelled, status="cancelled", version=1))

        history = get_order_history(catalog["customer_id"])
        assert [str(o.id) for o in history.active] == [active]
        assert [str(o.id) for o in history.delivered] == [delivered]
        assert [str(o.id) for o in history.cancelled] == [cancelled]
