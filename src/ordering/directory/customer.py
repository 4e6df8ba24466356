"""Customer aggregate — anyone who can place orders or own a shop."""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from ordering.directory.events import UserRegistered
from ordering.domain import ordering


class UserType(Enum):
    CUSTOMER = "customer"
    SHOP_OWNER = "shop_owner"
    ADMIN = "admin"


# Account types that may be created through public sign-up
SELF_SERVICE_TYPES = {UserType.CUSTOMER, UserType.SHOP_OWNER}


@ordering.aggregate
class Customer:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    user_type = String(choices=UserType, default=UserType.CUSTOMER.value)
    created_at = DateTime()

    @classmethod
    def register(cls, name, email, user_type=UserType.CUSTOMER.value):
        email = (email or "").strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError({"email": ["Invalid email address"]})

        customer = cls(
            name=name.strip(),
            email=email,
            user_type=user_type,
            created_at=datetime.now(UTC),
        )
        customer.raise_(
            UserRegistered(
                customer_id=str(customer.id),
                email=customer.email,
                user_type=customer.user_type,
                registered_at=customer.created_at,
            )
        )
        return customer

    @property
    def can_own_shops(self):
        return UserType(self.user_type) in (UserType.SHOP_OWNER, UserType.ADMIN)
