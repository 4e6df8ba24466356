"""Shop and FoodItem aggregates — the catalog that order lines point into."""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.directory.events import FoodItemAdded, ShopRegistered
from ordering.domain import ordering


@ordering.aggregate
class Shop:
    name = String(required=True, max_length=150)
    owner_id = Identifier(required=True)
    description = Text()
    created_at = DateTime()

    @classmethod
    def register(cls, name, owner_id, description=None):
        shop = cls(
            name=name.strip(),
            owner_id=owner_id,
            description=description,
            created_at=datetime.now(UTC),
        )
        shop.raise_(
            ShopRegistered(
                shop_id=str(shop.id),
                owner_id=str(owner_id),
                name=shop.name,
                registered_at=shop.created_at,
            )
        )
        return shop


@ordering.aggregate
class FoodItem:
    """A dish on a shop's menu. ``price`` is the unit price charged per portion."""

    shop_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    description = Text()
    price = Float(required=True, min_value=0.0)
    created_at = DateTime()

    @classmethod
    def add_to_menu(cls, shop_id, name, price, description=None):
        item = cls(
            shop_id=shop_id,
            name=name.strip(),
            price=price,
            description=description,
            created_at=datetime.now(UTC),
        )
        item.raise_(
            FoodItemAdded(
                food_item_id=str(item.id),
                shop_id=str(shop_id),
                name=item.name,
                price=item.price,
                added_at=item.created_at,
            )
        )
        return item
