"""Repository for the PaymentIntent aggregate."""

from ordering.domain import ordering
from ordering.payment.intent import IntentState, PaymentIntent


@ordering.repository(part_of=PaymentIntent)
class PaymentIntentRepository:
    def find_by_id(self, intent_id) -> PaymentIntent | None:
        results = self._dao.query.filter(id=str(intent_id)).all().items
        return results[0] if results else None

    def find_by_order(self, order_id) -> list[PaymentIntent]:
        return self._dao.query.filter(order_id=str(order_id)).all().items

    def find_open_for_order(self, order_id, amount=None, currency=None) -> PaymentIntent | None:
        """The open intent for ``order_id`` (and ``amount``/``currency`` when given), if any."""
        for intent in self.find_by_order(order_id):
            if intent.status != IntentState.REQUIRES_PAYMENT.value:
                continue
            if amount is not None and intent.amount != amount:
                continue
            if currency is not None and intent.currency != currency.upper():
                continue
            return intent
        return None
