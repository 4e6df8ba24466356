"""Repository for the CheckoutSession aggregate."""

from ordering.checkout.session import CheckoutSession, CheckoutState
from ordering.domain import ordering


@ordering.repository(part_of=CheckoutSession)
class CheckoutSessionRepository:
    def find_active_for_customer(self, customer_id) -> CheckoutSession | None:
        """The customer's session that has not completed yet, if any."""
        sessions = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return next((s for s in sessions if s.state != CheckoutState.SUCCESS.value), None)
