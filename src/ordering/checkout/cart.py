"""Cart management on a checkout session — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.checkout.session import CheckoutSession
from ordering.directory.customer import Customer
from ordering.directory.shop import FoodItem
from ordering.domain import ordering
from ordering.errors import CustomerNotFound, FoodItemNotFound

logger = structlog.get_logger(__name__)


@ordering.command(part_of="CheckoutSession")
class OpenCheckout:
    """Return the customer's open session, creating one if needed."""

    customer_id = Identifier(required=True)


@ordering.command(part_of="CheckoutSession")
class AddCartItem:
    session_id = Identifier(required=True)
    food_item_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@ordering.command(part_of="CheckoutSession")
class UpdateCartItemQuantity:
    """Set a line's quantity. Zero or a negative value removes the line."""

    session_id = Identifier(required=True)
    food_item_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="CheckoutSession")
class RemoveCartItem:
    session_id = Identifier(required=True)
    food_item_id = Identifier(required=True)


@ordering.command(part_of="CheckoutSession")
class ClearCart:
    session_id = Identifier(required=True)


@ordering.command_handler(part_of=CheckoutSession)
class ManageCartHandler:
    @handle(OpenCheckout)
    def open_checkout(self, command):
        if current_domain.repository_for(Customer).find_by_id(command.customer_id) is None:
            raise CustomerNotFound("Customer not found")

        repo = current_domain.repository_for(CheckoutSession)
        session = repo.find_active_for_customer(command.customer_id)
        if session is None:
            session = CheckoutSession.open(customer_id=command.customer_id)
            repo.add(session)
            logger.info("Checkout session opened", session_id=str(session.id), customer_id=command.customer_id)
        return str(session.id)

    @handle(AddCartItem)
    def add_cart_item(self, command):
        food_item = current_domain.repository_for(FoodItem).find_by_id(command.food_item_id)
        if food_item is None:
            raise FoodItemNotFound(f"Food item not found: {command.food_item_id}")

        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.add_item(
            food_item_id=str(food_item.id),
            shop_id=str(food_item.shop_id),
            name=food_item.name,
            unit_price=food_item.price,
            quantity=command.quantity or 1,
        )
        repo.add(session)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.update_quantity(command.food_item_id, command.quantity)
        repo.add(session)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.remove_item(command.food_item_id)
        repo.add(session)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.clear_cart()
        repo.add(session)
