"""Payment gateway port (abstract interface).

Amounts cross this boundary as integer minor units. Declines come back as
results with ``success=False``; transport or provider outages raise
``GatewayUnavailable``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GatewayUnavailable(Exception):
    """The provider could not be reached or answered with an error."""


@dataclass(frozen=True)
class IntentResult:
    """Result of creating or cancelling a payment intent."""

    success: bool
    intent_id: str | None = None
    client_secret: str | None = None
    status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class IntentStatus:
    """Provider-side view of an intent at retrieval time."""

    intent_id: str
    status: str
    amount: int
    amount_received: int
    currency: str

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class WebhookEvent:
    intent_id: str
    status: str  # succeeded, failed
    amount_received: int = 0
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def create_intent(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict,
        idempotency_key: str,
    ) -> IntentResult:
        """Create an intent; repeated calls with one idempotency key return the same intent."""
        ...

    @abstractmethod
    def retrieve_intent(self, intent_id: str) -> IntentStatus: ...

    @abstractmethod
    def cancel_intent(self, intent_id: str) -> IntentResult: ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...

    @abstractmethod
    def parse_webhook_event(self, payload: str) -> WebhookEvent | None:
        """Translate a verified payload; ``None`` for event types we ignore."""
        ...
