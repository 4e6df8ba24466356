"""Pydantic request/response schemas for the CraveKart API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ordering.checkout.details import DeliveryDetails


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254)
    # Admin accounts are provisioned out of band
    user_type: Literal["customer", "shop_owner"] = "customer"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Asha Rao",
                    "email": "asha@example.com",
                    "user_type": "customer",
                }
            ]
        }
    }


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    user_type: str
    created_at: datetime | None = None


class RegisterShopRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    owner_id: str
    description: str | None = None


class ShopResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    description: str | None = None


class AddFoodItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    price: float = Field(ge=0)
    description: str | None = None


class FoodItemResponse(BaseModel):
    id: str
    shop_id: str
    name: str
    price: float
    description: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineRequest(BaseModel):
    food_item_id: str
    quantity: int = Field(ge=1, default=1)
    # Accepted for compatibility; the server always re-prices from the catalog
    price: float | None = None


class CreateOrderRequest(BaseModel):
    customer_id: str
    shop_id: str
    items: list[OrderLineRequest] = Field(min_length=1)
    address: str = Field(min_length=3)
    total_amount: float | None = Field(default=None, ge=0)
    applied_offer_id: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "2c1f9a0e-7a55-4d0c-9d7e-1b0f5f8a4e21",
                    "shop_id": "8e4b2d7c-3f1a-4b6e-9c2d-5a7f1e3b9d04",
                    "items": [{"food_item_id": "b7d3e9f1-2a4c-4e8b-8f6a-0c1d2e3f4a5b", "quantity": 2}],
                    "address": "221B Residency Road, Bengaluru 560025. Phone: 9876543210",
                    "total_amount": 157.99,
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]
    version: int = Field(ge=1)


class ExpireUnpaidOrdersRequest(BaseModel):
    older_than_minutes: int | None = Field(default=None, ge=1)
    as_of: datetime | None = None


class OrderItemResponse(BaseModel):
    food_item_id: str
    name: str
    unit_price: float
    quantity: int
    price: float


class PricingResponse(BaseModel):
    subtotal: float
    discount: float
    taxable: float
    tax: float
    delivery_fee: float
    total: float


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    shop_id: str
    items: list[OrderItemResponse]
    pricing: PricingResponse | None = None
    total_amount: float
    currency: str
    address: str
    applied_offer_id: str | None = None
    status: str
    version: int
    payment_intent_id: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderHistoryResponse(BaseModel):
    active: list[OrderResponse]
    delivered: list[OrderResponse]
    cancelled: list[OrderResponse]


class ExpiredOrdersResponse(BaseModel):
    expired_count: int


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    order_id: str
    currency: str | None = Field(default=None, min_length=3, max_length=3, description="Must match the order currency")


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str | None = None
    amount: int
    currency: str
    order_id: str


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str


class PaymentConfirmationResponse(BaseModel):
    order_id: str
    payment_intent_id: str
    status: str
    amount: int


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"


class GatewayConfigResponse(BaseModel):
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class OpenCheckoutRequest(BaseModel):
    customer_id: str


class AddCartItemRequest(BaseModel):
    food_item_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int  # <= 0 removes the line


class SubmitDetailsRequest(DeliveryDetails):
    total_amount: float | None = Field(default=None, ge=0)


class CompletePaymentRequest(BaseModel):
    payment_intent_id: str | None = None


class CartLineResponse(BaseModel):
    food_item_id: str
    name: str
    unit_price: float
    quantity: int
    line_total: float


class CheckoutSessionResponse(BaseModel):
    id: str
    customer_id: str
    shop_id: str | None = None
    state: str
    items: list[CartLineResponse]
    item_count: int
    pricing: PricingResponse
    order_id: str | None = None
    payment_intent_id: str | None = None
    client_secret: str | None = None
    last_error: str | None = None
