"""
Cas d'usage 'payments': orchestre bookings (réservation), stripe_client (session) et reconciliation.
Ordre imposé: la réservation est persistée avant l'émission de la session Stripe.
"""
from typing import Any, Dict, Optional, Union
import logging

from belizevibes.bookings import repository as bookings_repo
from belizevibes.bookings import service as bookings_service
from belizevibes.bookings.models import BookingRequest, StoredBooking
from belizevibes.errors import NotFoundError, ReconciliationError, ValidationError
from . import reconciliation
from .models import CheckoutResponse, PaymentIntent, ReconciliationResult
from .stripe_client import PaymentIntentIssuer, field

logger = logging.getLogger(__name__)

CONFIRM_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
    "payment_intent.succeeded",
}
FAILURE_EVENTS = {
    "checkout.session.async_payment_failed",
    "payment_intent.payment_failed",
}

def _issue_for(booking: StoredBooking, issuer: PaymentIntentIssuer) -> PaymentIntent:
    intent = issuer.issue_intent(
        booking.id,
        booking.total_amount,
        booking.currency,
        customer_email=booking.email or None,
    )
    bookings_repo.record_payment_session(
        booking_id=booking.id,
        session_id=intent.session_id,
        amount=intent.amount,
        currency=intent.currency,
    )
    return intent

def start_checkout(booking_id: str, issuer: PaymentIntentIssuer) -> CheckoutResponse:
    """
    Émet une session de paiement pour une réservation déjà stockée.
    - NotFoundError si la réservation n'existe pas
    - ValidationError si elle n'est plus 'pending' (déjà confirmée ou annulée)
    """
    booking = bookings_service.get_booking(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.status != "pending":
        raise ValidationError("Booking is not awaiting payment")
    return CheckoutResponse(booking=booking, payment=_issue_for(booking, issuer))

def create_booking_and_checkout(
    payload: Union[BookingRequest, Dict[str, Any]],
    issuer: PaymentIntentIssuer,
    user_id: Optional[str] = None,
) -> CheckoutResponse:
    """
    Parcours complet: réservation (pending/pending) puis session Stripe.
    Si Stripe échoue, la réservation reste 'pending' et PaymentProviderError remonte.
    """
    booking = bookings_service.create_booking(payload, user_id=user_id)
    return CheckoutResponse(booking=booking, payment=_issue_for(booking, issuer))

def _booking_reference(obj: Any) -> str:
    metadata = field(obj, "metadata", {}) or {}
    return field(metadata, "booking_id", "") or field(obj, "client_reference_id", "")

def _payment_reference(event_type: str, obj: Any) -> Optional[str]:
    if event_type.startswith("payment_intent."):
        return field(obj, "id", None)
    return field(obj, "payment_intent", None) or field(obj, "id", None)

def handle_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Dispatch d'un événement Stripe déjà authentifié.
    - paiement réussi -> reconciliation.confirm(booking_id)
    - paiement échoué -> payment_status 'failed' (la réservation reste 'pending')
    - autre type, ou événement sans référence exploitable -> ignoré
    PersistenceError remonte (Stripe rejouera le webhook).
    """
    event_type = field(event, "type", "")
    obj = field(field(event, "data", {}), "object", {})

    if event_type not in CONFIRM_EVENTS and event_type not in FAILURE_EVENTS:
        return {"status": "ignored", "type": event_type}

    if event_type == "checkout.session.completed" and field(obj, "payment_status", "") != "paid":
        # Paiement différé: la confirmation arrivera via async_payment_succeeded
        logger.info("checkout completed without payment yet session_id=%s", field(obj, "id", ""))
        return {"status": "ignored", "type": event_type, "reason": "payment_not_completed"}

    booking_ref = _booking_reference(obj)
    try:
        booking_id = reconciliation.validate_booking_id(booking_ref)
    except ReconciliationError:
        logger.warning("stripe event without valid booking reference type=%s ref=%r", event_type, booking_ref)
        return {"status": "ignored", "type": event_type, "reason": "invalid_booking_reference"}

    reference = _payment_reference(event_type, obj)
    if event_type in CONFIRM_EVENTS:
        result = reconciliation.confirm(booking_id, payment_reference=reference)
        return {"status": "ok", "type": event_type, "booking_id": booking_id, "outcome": result.outcome}

    updated = bookings_repo.mark_payment_failed(booking_id, payment_reference=reference)
    logger.info("payment failed booking_id=%s recorded=%s", booking_id, bool(updated))
    return {"status": "ok", "type": event_type, "booking_id": booking_id, "outcome": "payment_failed" if updated else "unchanged"}

def confirm_from_redirect(
    booking_id: Optional[str],
    session_id: Optional[str],
    issuer: Optional[PaymentIntentIssuer] = None,
) -> ReconciliationResult:
    """
    Réconciliation depuis la page de succès (?booking=<id>&session_id=<cs_...>).
    La session Stripe doit être 'paid' et référencer exactement la même réservation.
    Sans session_id, rien n'est confirmé ici: le webhook reste le chemin de confirmation.
    Lève ReconciliationError / PaymentProviderError / PersistenceError; la vue journalise.
    """
    booking_id = reconciliation.validate_booking_id(booking_id)
    if not session_id:
        raise ReconciliationError("Payment session is required to confirm a booking")
    if issuer is None:
        raise ReconciliationError("Payment session cannot be verified")
    session = issuer.retrieve_session(session_id)
    if session.get("payment_status") != "paid":
        raise ReconciliationError(f"Payment not completed (payment_status={session.get('payment_status')})")
    if session.get("booking_id") != booking_id:
        raise ReconciliationError("Payment session does not match booking")
    reference = session.get("payment_intent") or session.get("id")
    return reconciliation.confirm(booking_id, payment_reference=reference)
