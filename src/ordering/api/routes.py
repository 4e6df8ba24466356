"""FastAPI routes for the ordering context — directory, orders, payments, checkout.

Each route translates between Pydantic schemas (external contract) and
Protean commands or queries (internal domain concepts).
"""

import json

from fastapi import APIRouter, Header, HTTPException, Request
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddCartItemRequest,
    AddFoodItemRequest,
    CartLineResponse,
    CheckoutSessionResponse,
    CompletePaymentRequest,
    ConfigureGatewayRequest,
    ConfirmPaymentRequest,
    CreateOrderRequest,
    CreatePaymentIntentRequest,
    ExpiredOrdersResponse,
    ExpireUnpaidOrdersRequest,
    FoodItemResponse,
    GatewayConfigResponse,
    OpenCheckoutRequest,
    OrderHistoryResponse,
    OrderItemResponse,
    OrderResponse,
    PaymentConfirmationResponse,
    PaymentIntentResponse,
    PricingResponse,
    RegisterShopRequest,
    RegisterUserRequest,
    ShopResponse,
    StatusResponse,
    SubmitDetailsRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UserResponse,
)
from ordering.checkout.cart import AddCartItem, ClearCart, OpenCheckout, RemoveCartItem, UpdateCartItemQuantity
from ordering.checkout.details import DeliveryDetails
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.checkout.session import CheckoutSession
from ordering.directory.customer import Customer
from ordering.directory.registration import AddFoodItem, RegisterShop, RegisterUser
from ordering.directory.shop import FoodItem, Shop
from ordering.order.creation import PlaceOrder
from ordering.order.queries import get_all_orders, get_order, get_order_history, get_shop_orders, get_user_orders
from ordering.order.reconciliation import ExpireUnpaidOrders
from ordering.order.status import UpdateOrderStatus
from ordering.payment.confirmation import ConfirmPayment, ProcessPaymentWebhook
from ordering.payment.creation import CreatePaymentIntent
from ordering.payment.gateway import get_gateway
from ordering.payment.gateway.fake_adapter import FakeGateway
from ordering.utils.logging import current_environment


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _user_response(customer) -> UserResponse:
    return UserResponse(
        id=str(customer.id),
        name=customer.name,
        email=customer.email,
        user_type=customer.user_type,
        created_at=customer.created_at,
    )


def _shop_response(shop) -> ShopResponse:
    return ShopResponse(id=str(shop.id), name=shop.name, owner_id=str(shop.owner_id), description=shop.description)


def _food_item_response(item) -> FoodItemResponse:
    return FoodItemResponse(
        id=str(item.id),
        shop_id=str(item.shop_id),
        name=item.name,
        price=item.price,
        description=item.description,
    )


def _order_response(order) -> OrderResponse:
    pricing = None
    if order.pricing:
        pricing = PricingResponse(
            subtotal=order.pricing.subtotal,
            discount=order.pricing.discount,
            taxable=order.pricing.taxable,
            tax=order.pricing.tax,
            delivery_fee=order.pricing.delivery_fee,
            total=order.pricing.total,
        )
    return OrderResponse(
        id=str(order.id),
        customer_id=str(order.customer_id),
        shop_id=str(order.shop_id),
        items=[
            OrderItemResponse(
                food_item_id=str(item.food_item_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
        pricing=pricing,
        total_amount=order.total_amount,
        currency=order.currency,
        address=order.address,
        applied_offer_id=str(order.applied_offer_id) if order.applied_offer_id else None,
        status=order.status,
        version=order.version,
        payment_intent_id=order.payment_intent_id,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _session_response(session) -> CheckoutSessionResponse:
    pricing = session.pricing()
    return CheckoutSessionResponse(
        id=str(session.id),
        customer_id=str(session.customer_id),
        shop_id=str(session.shop_id) if session.shop_id else None,
        state=session.state,
        items=[
            CartLineResponse(
                food_item_id=str(line.food_item_id),
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                line_total=round(line.unit_price * line.quantity, 2),
            )
            for line in session.items
        ],
        item_count=session.item_count,
        pricing=PricingResponse(**pricing.to_dict()),
        order_id=str(session.order_id) if session.order_id else None,
        payment_intent_id=session.payment_intent_id,
        client_secret=session.client_secret,
        last_error=session.last_error,
    )


def _load_session(session_id) -> CheckoutSessionResponse:
    return _session_response(current_domain.repository_for(CheckoutSession).get(session_id))


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserResponse)
async def register_user(body: RegisterUserRequest) -> UserResponse:
    """Sign up a customer or shop owner."""
    command = RegisterUser(name=body.name, email=body.email, user_type=body.user_type)
    customer_id = current_domain.process(command, asynchronous=False)
    return _user_response(current_domain.repository_for(Customer).get(customer_id))


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    return _user_response(current_domain.repository_for(Customer).get(user_id))


# ---------------------------------------------------------------------------
# Shop Router
# ---------------------------------------------------------------------------
shop_router = APIRouter(prefix="/shops", tags=["shops"])


@shop_router.post("", status_code=201, response_model=ShopResponse)
async def register_shop(body: RegisterShopRequest) -> ShopResponse:
    command = RegisterShop(name=body.name, owner_id=body.owner_id, description=body.description)
    shop_id = current_domain.process(command, asynchronous=False)
    shop = current_domain.repository_for(Shop).get(shop_id)
    return _shop_response(shop)


@shop_router.get("", response_model=list[ShopResponse])
async def list_shops(owner_id: str) -> list[ShopResponse]:
    """Shops run by ``owner_id``, for the owner dashboard."""
    current_domain.repository_for(Customer).get(owner_id)
    return [_shop_response(shop) for shop in current_domain.repository_for(Shop).find_by_owner(owner_id)]


@shop_router.get("/{shop_id}", response_model=ShopResponse)
async def get_shop(shop_id: str) -> ShopResponse:
    shop = current_domain.repository_for(Shop).get(shop_id)
    return _shop_response(shop)


@shop_router.post("/{shop_id}/food-items", status_code=201, response_model=FoodItemResponse)
async def add_food_item(shop_id: str, body: AddFoodItemRequest) -> FoodItemResponse:
    command = AddFoodItem(shop_id=shop_id, name=body.name, price=body.price, description=body.description)
    food_item_id = current_domain.process(command, asynchronous=False)
    return _food_item_response(current_domain.repository_for(FoodItem).get(food_item_id))


@shop_router.get("/{shop_id}/food-items", response_model=list[FoodItemResponse])
async def list_food_items(shop_id: str) -> list[FoodItemResponse]:
    current_domain.repository_for(Shop).get(shop_id)
    return [_food_item_response(item) for item in current_domain.repository_for(FoodItem).find_by_shop(shop_id)]


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    """Validate, price and persist an order. Client line prices are ignored."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        shop_id=body.shop_id,
        items=json.dumps([{"food_item_id": line.food_item_id, "quantity": line.quantity} for line in body.items]),
        address=body.address,
        total_amount=body.total_amount,
        applied_offer_id=body.applied_offer_id,
        currency=body.currency,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(get_order(order_id))


@order_router.get("", response_model=list[OrderResponse])
async def list_orders() -> list[OrderResponse]:
    """All orders, newest first. Used by the admin dashboard."""
    return [_order_response(order) for order in get_all_orders()]


@order_router.get("/user/{user_id}", response_model=list[OrderResponse])
async def list_user_orders(user_id: str) -> list[OrderResponse]:
    return [_order_response(order) for order in get_user_orders(user_id)]


@order_router.get("/user/{user_id}/history", response_model=OrderHistoryResponse)
async def user_order_history(user_id: str) -> OrderHistoryResponse:
    history = get_order_history(user_id)
    return OrderHistoryResponse(
        active=[_order_response(o) for o in history.active],
        delivered=[_order_response(o) for o in history.delivered],
        cancelled=[_order_response(o) for o in history.cancelled],
    )


@order_router.get("/shop/{shop_id}", response_model=list[OrderResponse])
async def list_shop_orders(shop_id: str) -> list[OrderResponse]:
    return [_order_response(order) for order in get_shop_orders(shop_id)]


@order_router.post("/maintenance/expire-unpaid", response_model=ExpiredOrdersResponse)
async def expire_unpaid_orders(body: ExpireUnpaidOrdersRequest | None = None) -> ExpiredOrdersResponse:
    """Cancel orders whose payment never completed. Called by an external scheduler."""
    body = body or ExpireUnpaidOrdersRequest()
    command = ExpireUnpaidOrders(older_than_minutes=body.older_than_minutes, as_of=body.as_of)
    expired = current_domain.process(command, asynchronous=False)
    return ExpiredOrdersResponse(expired_count=expired or 0)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: str) -> OrderResponse:
    return _order_response(get_order(order_id))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    """Move an order along its lifecycle. Answers 409 when ``version`` is stale."""
    command = UpdateOrderStatus(order_id=order_id, status=body.status, version=body.version)
    current_domain.process(command, asynchronous=False)
    return _order_response(get_order(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/create-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(body: CreatePaymentIntentRequest) -> PaymentIntentResponse:
    """Open (or reuse) a payment intent for the order's stored total."""
    result = current_domain.process(
        CreatePaymentIntent(order_id=body.order_id, currency=body.currency),
        asynchronous=False,
    )
    return PaymentIntentResponse(**result)


@payment_router.post("/confirm/{order_id}", response_model=PaymentConfirmationResponse)
async def confirm_payment(order_id: str, body: ConfirmPaymentRequest) -> PaymentConfirmationResponse:
    """Confirm payment after verifying capture with the provider."""
    result = current_domain.process(
        ConfirmPayment(order_id=order_id, payment_intent_id=body.payment_intent_id),
        asynchronous=False,
    )
    return PaymentConfirmationResponse(**result)


@payment_router.post("/webhook", response_model=StatusResponse)
async def process_webhook(
    request: Request,
    x_gateway_signature: str = Header(default=""),
    stripe_signature: str = Header(default=""),
) -> StatusResponse:
    """Process a signed payment provider callback."""
    payload = (await request.body()).decode("utf-8")
    gateway = get_gateway()
    if not gateway.verify_webhook_signature(payload, stripe_signature or x_gateway_signature):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    event = gateway.parse_webhook_event(payload)
    if event is None:
        return StatusResponse(status="ignored")

    outcome = current_domain.process(
        ProcessPaymentWebhook(
            payment_intent_id=event.intent_id,
            status=event.status,
            amount_received=event.amount_received,
            failure_reason=event.failure_reason,
        ),
        asynchronous=False,
    )
    return StatusResponse(status=outcome)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the fake gateway's behavior (non-production only)."""
    if current_environment() == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration is disabled in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=409, detail="Only the fake gateway can be configured")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(should_succeed=gateway.should_succeed, failure_reason=gateway.failure_reason)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout/sessions", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutSessionResponse)
async def open_checkout(body: OpenCheckoutRequest) -> CheckoutSessionResponse:
    """Return the customer's open checkout session, creating it on first use."""
    session_id = current_domain.process(OpenCheckout(customer_id=body.customer_id), asynchronous=False)
    return _load_session(session_id)


@checkout_router.get("/{session_id}", response_model=CheckoutSessionResponse)
async def read_checkout(session_id: str) -> CheckoutSessionResponse:
    return _load_session(session_id)


@checkout_router.post("/{session_id}/items", response_model=CheckoutSessionResponse)
async def add_cart_item(session_id: str, body: AddCartItemRequest) -> CheckoutSessionResponse:
    command = AddCartItem(session_id=session_id, food_item_id=body.food_item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _load_session(session_id)


@checkout_router.patch("/{session_id}/items/{food_item_id}", response_model=CheckoutSessionResponse)
async def update_cart_item(session_id: str, food_item_id: str, body: UpdateCartItemRequest) -> CheckoutSessionResponse:
    command = UpdateCartItemQuantity(session_id=session_id, food_item_id=food_item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _load_session(session_id)


@checkout_router.delete("/{session_id}/items/{food_item_id}", response_model=CheckoutSessionResponse)
async def remove_cart_item(session_id: str, food_item_id: str) -> CheckoutSessionResponse:
    current_domain.process(RemoveCartItem(session_id=session_id, food_item_id=food_item_id), asynchronous=False)
    return _load_session(session_id)


@checkout_router.delete("/{session_id}/items", response_model=CheckoutSessionResponse)
async def clear_cart(session_id: str) -> CheckoutSessionResponse:
    current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
    return _load_session(session_id)


@checkout_router.post("/{session_id}/details", response_model=CheckoutSessionResponse)
async def submit_details(session_id: str, body: SubmitDetailsRequest) -> CheckoutSessionResponse:
    """Stage one: place the order for the cart and open its payment intent."""
    details = DeliveryDetails(**body.model_dump(exclude={"total_amount"}))
    CheckoutOrchestrator().submit_details(session_id, details, client_total=body.total_amount)
    return _load_session(session_id)


@checkout_router.post("/{session_id}/payment-complete", response_model=CheckoutSessionResponse)
async def complete_payment(session_id: str, body: CompletePaymentRequest | None = None) -> CheckoutSessionResponse:
    """Stage two: the client reports capture; the server verifies it with the provider."""
    intent_id = body.payment_intent_id if body else None
    CheckoutOrchestrator().complete_payment(session_id, payment_intent_id=intent_id)
    return _load_session(session_id)


@checkout_router.post("/{session_id}/back", response_model=CheckoutSessionResponse)
async def go_back(session_id: str) -> CheckoutSessionResponse:
    CheckoutOrchestrator().go_back(session_id)
    return _load_session(session_id)
