"""Ordering bounded context — food orders, checkout and payment intents.

Owns the directory of customers, shops and food items that orders reference,
the order lifecycle, the per-customer checkout session that replaces a
browser-held cart, and the payment intents created against an order's
authoritative total.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
