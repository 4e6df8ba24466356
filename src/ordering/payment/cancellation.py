"""Payment intent cancellation — command and handler."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import PaymentProviderError
from ordering.payment.gateway import get_gateway
from ordering.payment.intent import PaymentIntent

logger = structlog.get_logger(__name__)


@ordering.command(part_of="PaymentIntent")
class CancelPaymentIntent:
    payment_intent_id = String(required=True, max_length=255)


@ordering.command_handler(part_of=PaymentIntent)
class CancelPaymentIntentHandler:
    @handle(CancelPaymentIntent)
    def cancel_payment_intent(self, command):
        repo = current_domain.repository_for(PaymentIntent)
        intent = repo.get(command.payment_intent_id)
        if not intent.is_open:
            return False

        result = get_gateway().cancel_intent(str(intent.id))
        if not result.success:
            raise PaymentProviderError(result.failure_reason or "Payment intent could not be cancelled")

        intent.cancel()
        repo.add(intent)
        logger.info("Payment intent cancelled", payment_intent_id=str(intent.id), order_id=str(intent.order_id))
        return True
