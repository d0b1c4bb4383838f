# module belizevibes.payments.models
from typing import Literal, Optional

from pydantic import BaseModel

from belizevibes.bookings.models import StoredBooking

ReconciliationOutcome = Literal["confirmed", "already_confirmed", "not_found_or_already_confirmed"]


class PaymentIntent(BaseModel):
    """Session de paiement émise par Stripe pour une réservation (montant en unités mineures)."""
    booking_id: str
    session_id: str
    client_secret_or_session_url: str
    amount: int
    currency: str


class ReconciliationResult(BaseModel):
    booking_id: str
    outcome: ReconciliationOutcome
    booking: Optional[StoredBooking] = None

    @property
    def changed(self) -> bool:
        return self.outcome == "confirmed"


class CheckoutResponse(BaseModel):
    booking: StoredBooking
    payment: PaymentIntent
