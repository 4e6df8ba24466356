"""Directory registration — users, shops and menu items."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.directory.customer import Customer, UserType
from ordering.directory.shop import FoodItem, Shop
from ordering.domain import ordering
from ordering.errors import CustomerNotFound, ShopNotFound, UserAlreadyExists

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Customer")
class RegisterUser:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    user_type = String(choices=UserType, default=UserType.CUSTOMER.value)


@ordering.command(part_of="Shop")
class RegisterShop:
    name = String(required=True, max_length=150)
    owner_id = Identifier(required=True)
    description = Text()


@ordering.command(part_of="FoodItem")
class AddFoodItem:
    shop_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    price = Float(required=True, min_value=0.0)
    description = Text()


@ordering.command_handler(part_of=Customer)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(Customer)
        if repo.find_by_email(command.email) is not None:
            raise UserAlreadyExists("User already exists")

        customer = Customer.register(
            name=command.name,
            email=command.email,
            user_type=command.user_type,
        )
        repo.add(customer)
        logger.info("User registered", customer_id=str(customer.id), user_type=customer.user_type)
        return str(customer.id)


@ordering.command_handler(part_of=Shop)
class RegisterShopHandler:
    @handle(RegisterShop)
    def register_shop(self, command):
        owner = current_domain.repository_for(Customer).find_by_id(command.owner_id)
        if owner is None:
            raise CustomerNotFound("Shop owner not found", field="owner_id")
        if not owner.can_own_shops:
            raise ValidationError({"owner_id": ["Only shop owners can register a shop"]})

        shop = Shop.register(
            name=command.name,
            owner_id=command.owner_id,
            description=command.description,
        )
        current_domain.repository_for(Shop).add(shop)
        logger.info("Shop registered", shop_id=str(shop.id), owner_id=str(command.owner_id))
        return str(shop.id)


@ordering.command_handler(part_of=FoodItem)
class AddFoodItemHandler:
    @handle(AddFoodItem)
    def add_food_item(self, command):
        if current_domain.repository_for(Shop).find_by_id(command.shop_id) is None:
            raise ShopNotFound("Shop not found")

        item = FoodItem.add_to_menu(
            shop_id=command.shop_id,
            name=command.name,
            price=command.price,
            description=command.description,
        )
        current_domain.repository_for(FoodItem).add(item)
        return str(item.id)
