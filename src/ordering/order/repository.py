"""Repository for the Order aggregate."""

from datetime import UTC, datetime

from ordering.domain import ordering
from ordering.order.order import OPEN_STATUSES, Order


def as_naive_utc(value: datetime | None) -> datetime | None:
    """Normalize to naive UTC so stored and computed timestamps compare safely."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def newest_first(orders):
    return sorted(
        orders,
        key=lambda order: as_naive_utc(order.created_at) or datetime.min,
        reverse=True,
    )


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_id(self, order_id) -> Order | None:
        results = self._dao.query.filter(id=str(order_id)).all().items
        return results[0] if results else None

    def find_all(self) -> list[Order]:
        return newest_first(self._dao.query.all().items)

    def find_by_customer(self, customer_id) -> list[Order]:
        return newest_first(self._dao.query.filter(customer_id=str(customer_id)).all().items)

    def find_by_shop(self, shop_id) -> list[Order]:
        return newest_first(self._dao.query.filter(shop_id=str(shop_id)).all().items)

    def find_open_before(self, cutoff: datetime) -> list[Order]:
        """Orders still awaiting payment that were created before ``cutoff``."""
        cutoff = as_naive_utc(cutoff)
        candidates = []
        for status in OPEN_STATUSES:
            candidates.extend(self._dao.query.filter(status=status.value).all().items)
        return [order for order in candidates if order.created_at and as_naive_utc(order.created_at) < cutoff]
