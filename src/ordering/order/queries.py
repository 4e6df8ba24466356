"""Read-side order queries used by the API.

List queries re-check every row against the requested customer or shop
before returning it. A row that slips through a storage-level filter is
dropped and logged rather than leaked to another customer.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from ordering.order.order import ACTIVE_STATUSES, Order, OrderStatus

logger = structlog.get_logger(__name__)


@dataclass
class OrderHistory:
    active: list = field(default_factory=list)
    delivered: list = field(default_factory=list)
    cancelled: list = field(default_factory=list)


def _only_matching(orders, attribute, expected):
    kept = []
    for order in orders:
        if str(getattr(order, attribute)) == str(expected):
            kept.append(order)
        else:
            logger.warning(
                "Discarded order not matching query filter",
                order_id=str(order.id),
                attribute=attribute,
                expected=str(expected),
            )
    return kept


def get_order(order_id) -> Order:
    """Fetch one order. Raises ``ObjectNotFoundError`` when it does not exist."""
    return current_domain.repository_for(Order).get(order_id)


def get_all_orders() -> list[Order]:
    """Every order on the platform, newest first."""
    return current_domain.repository_for(Order).find_all()


def get_user_orders(customer_id) -> list[Order]:
    """All orders placed by ``customer_id``, newest first."""
    orders = current_domain.repository_for(Order).find_by_customer(customer_id)
    return _only_matching(orders, "customer_id", customer_id)


def get_shop_orders(shop_id) -> list[Order]:
    """All orders placed with ``shop_id``, newest first."""
    orders = current_domain.repository_for(Order).find_by_shop(shop_id)
    return _only_matching(orders, "shop_id", shop_id)


def get_order_history(customer_id) -> OrderHistory:
    """Split a customer's orders into active, delivered and cancelled groups."""
    history = OrderHistory()
    for order in get_user_orders(customer_id):
        status = OrderStatus(order.status)
        if status in ACTIVE_STATUSES:
            history.active.append(order)
        elif status == OrderStatus.DELIVERED:
            history.delivered.append(order)
        else:
            history.cancelled.append(order)
    return history
