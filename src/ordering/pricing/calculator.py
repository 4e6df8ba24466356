"""Checkout pricing: subtotal → discount → taxable → tax → delivery fee → total.

Pure functions over an immutable ``PricingPolicy``. The same calculation
feeds the cart display and the amount an order is charged, so the server
total is always the authoritative one; a client-submitted total is only
checked against it.

    discount = subtotal * discount_rate   if subtotal >= discount_threshold
    taxable  = subtotal - discount
    tax      = taxable * tax_rate
    total    = taxable + tax + delivery_fee

Arithmetic is done in ``Decimal`` and every component is rounded half-up to
two places for presentation.
"""

import os
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from ordering.errors import PricingMismatch

CENTS = Decimal("0.01")
PRICE_TOLERANCE = 0.01


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _money(value: Decimal) -> float:
    return float(value.quantize(CENTS, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PricingPolicy:
    discount_threshold: float = 200.0
    discount_rate: float = 0.25
    tax_rate: float = 0.08
    delivery_fee: float = 49.99

    @classmethod
    def from_env(cls) -> "PricingPolicy":
        """Build a policy from PRICING_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            discount_threshold=float(os.getenv("PRICING_DISCOUNT_THRESHOLD", defaults.discount_threshold)),
            discount_rate=float(os.getenv("PRICING_DISCOUNT_RATE", defaults.discount_rate)),
            tax_rate=float(os.getenv("PRICING_TAX_RATE", defaults.tax_rate)),
            delivery_fee=float(os.getenv("PRICING_DELIVERY_FEE", defaults.delivery_fee)),
        )


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: float
    discount: float
    taxable: float
    tax: float
    delivery_fee: float
    total: float

    @property
    def discount_applied(self) -> bool:
        return self.discount > 0

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_pricing(subtotal, policy: PricingPolicy | None = None) -> PricingBreakdown:
    """Price a subtotal under the given policy (defaults to the environment policy)."""
    policy = policy or PricingPolicy.from_env()
    subtotal = _dec(subtotal)
    if subtotal < 0:
        raise ValueError("Subtotal cannot be negative")

    discount = subtotal * _dec(policy.discount_rate) if subtotal >= _dec(policy.discount_threshold) else Decimal("0")
    taxable = subtotal - discount
    tax = taxable * _dec(policy.tax_rate)
    fee = _dec(policy.delivery_fee)
    total = taxable + tax + fee

    return PricingBreakdown(
        subtotal=_money(subtotal),
        discount=_money(discount),
        taxable=_money(taxable),
        tax=_money(tax),
        delivery_fee=_money(fee),
        total=_money(total),
    )


def subtotal_of(lines) -> float:
    """Sum ``unit_price * quantity`` over objects or dicts carrying those keys."""
    total = Decimal("0")
    for line in lines:
        if isinstance(line, dict):
            unit_price, quantity = line["unit_price"], line["quantity"]
        else:
            unit_price, quantity = line.unit_price, line.quantity
        total += _dec(unit_price) * int(quantity)
    return _money(total)


def verify_client_total(client_total, breakdown: PricingBreakdown, tolerance: float = PRICE_TOLERANCE) -> None:
    """Reject a client total that drifts from the server total by more than ``tolerance``."""
    if client_total is None:
        return
    drift = abs(_dec(client_total) - _dec(breakdown.total))
    if drift > _dec(tolerance):
        raise PricingMismatch(
            f"Submitted total {float(client_total):.2f} does not match the calculated total {breakdown.total:.2f}"
        )


def to_minor_units(amount) -> int:
    """Convert a currency amount to integer minor units (paise, cents)."""
    return int((_dec(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
