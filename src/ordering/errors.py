"""Business errors raised by the ordering context.

Every error subclasses Protean's ``ValidationError`` so that raising one
inside a command handler rolls back the unit of work exactly like a field
validation failure. Each class carries a stable ``code`` for API clients and
the HTTP status the API layer should answer with.
"""

from protean.exceptions import ValidationError


class CheckoutError(ValidationError):
    """Base class for ordering and checkout failures."""

    code = "checkout_error"
    status_code = 400
    field = "_entity"

    def __init__(self, message, field=None):
        self.message = message
        self.field = field or self.field
        super().__init__({self.field: [message]})

    def __str__(self):
        return self.message


class InvalidIdentifier(CheckoutError):
    code = "invalid_identifier"


class CustomerNotFound(CheckoutError):
    code = "customer_not_found"
    field = "customer_id"


class ShopNotFound(CheckoutError):
    code = "shop_not_found"
    field = "shop_id"


class FoodItemNotFound(CheckoutError):
    code = "food_item_not_found"
    field = "items"


class ItemShopMismatch(CheckoutError):
    """A food item belongs to a different shop than the order."""

    code = "item_shop_mismatch"
    field = "items"


class EmptyOrder(CheckoutError):
    code = "empty_order"
    field = "items"


class PricingMismatch(CheckoutError):
    """The client-displayed total disagrees with the server total."""

    code = "pricing_mismatch"
    field = "total_amount"


class CartShopConflict(CheckoutError):
    """The cart already holds items from another shop."""

    code = "cart_shop_conflict"
    field = "shop_id"


class UserAlreadyExists(CheckoutError):
    code = "user_already_exists"
    field = "email"


class PaymentNotConfirmed(CheckoutError):
    """The provider does not report the intent as fully captured."""

    code = "payment_not_confirmed"
    status_code = 402
    field = "payment_intent_id"


class OrderVersionConflict(CheckoutError):
    code = "order_version_conflict"
    status_code = 409
    field = "version"


class PaymentProviderError(CheckoutError):
    """The payment provider rejected or failed an intent operation."""

    code = "payment_provider_error"
    status_code = 502
    field = "payment"


def error_message(exc):
    """Flatten an error into a single human-readable message."""
    if isinstance(exc, CheckoutError):
        return exc.message
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return "; ".join(
            f"{msg}" if key == "_entity" else f"{key}: {msg}"
            for key, values in messages.items()
            for msg in (values if isinstance(values, list) else [values])
        )
    return str(exc)
