"""Lookup repositories for the directory aggregates.

``find_by_*`` methods return ``None`` (or an empty list) for missing rows so
that callers such as the order validator decide which error to raise.
"""

from ordering.directory.customer import Customer
from ordering.directory.shop import FoodItem, Shop
from ordering.domain import ordering


def _first(dao, **filters):
    results = dao.query.filter(**filters).all().items
    return results[0] if results else None


@ordering.repository(part_of=Customer)
class CustomerRepository:
    def find_by_id(self, customer_id) -> Customer | None:
        return _first(self._dao, id=str(customer_id))

    def find_by_email(self, email: str) -> Customer | None:
        return _first(self._dao, email=email.strip().lower())


@ordering.repository(part_of=Shop)
class ShopRepository:
    def find_by_id(self, shop_id) -> Shop | None:
        return _first(self._dao, id=str(shop_id))

    def find_by_owner(self, owner_id) -> list[Shop]:
        shops = self._dao.query.filter(owner_id=str(owner_id)).all().items
        return sorted(shops, key=lambda shop: shop.name.lower())


@ordering.repository(part_of=FoodItem)
class FoodItemRepository:
    def find_by_id(self, food_item_id) -> FoodItem | None:
        return _first(self._dao, id=str(food_item_id))

    def find_by_shop(self, shop_id) -> list[FoodItem]:
        items = self._dao.query.filter(shop_id=str(shop_id)).all().items
        return sorted(items, key=lambda item: item.name.lower())
