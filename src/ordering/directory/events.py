"""Domain events for the customer, shop and food item directory."""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Customer")
class UserRegistered:
    """A customer, shop owner or admin account was created."""

    __version__ = 1

    customer_id = Identifier(required=True)
    email = String(required=True)
    user_type = String(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Shop")
class ShopRegistered:
    __version__ = 1

    shop_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    name = String(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="FoodItem")
class FoodItemAdded:
    __version__ = 1

    food_item_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    added_at = DateTime(required=True)
