"""Payment gateway factory.

``get_gateway()`` builds the adapter named by ``PAYMENT_GATEWAY`` on first
use: ``stripe`` for production, anything else for the in-memory fake.
The fake accepts a public test signature on webhooks, so it is refused
when the service runs in production.
Tests swap implementations with ``set_gateway()`` / ``reset_gateway()``.
"""

import os

from protean.exceptions import ConfigurationError

from ordering.payment.gateway.fake_adapter import FakeGateway
from ordering.payment.gateway.port import PaymentGateway
from ordering.payment.gateway.stripe_adapter import StripeGateway
from ordering.utils.logging import current_environment

_current_gateway: PaymentGateway | None = None


def build_gateway() -> PaymentGateway:
    if os.getenv("PAYMENT_GATEWAY", "fake").lower() == "stripe":
        return StripeGateway(
            api_key=os.environ["STRIPE_API_KEY"],
            webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
        )
    if current_environment() == "production":
        raise ConfigurationError("PAYMENT_GATEWAY must be 'stripe' in production")
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
