import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from belizevibes.bookings import service as bookings_service
from belizevibes.bookings.models import StoredBooking
from belizevibes.errors import NotFoundError
from belizevibes.payments import service as payments_service
from belizevibes.payments.stripe_client import PaymentIntentIssuer, get_payment_issuer
from belizevibes.utils.rate_limit import optional_rate_limit
from belizevibes.utils.security import optional_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/bookings", tags=["Bookings API"])

def _user_id(user: Optional[Dict[str, Any]]) -> Optional[str]:
    return (user or {}).get("id") or None

def _load_owned(booking_id: str, user: Optional[Dict[str, Any]]) -> StoredBooking:
    booking = bookings_service.get_booking(booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id and booking.user_id != _user_id(user):
        raise HTTPException(status_code=403, detail="Booking belongs to another user")
    return booking

# module belizevibes.bookings.views
@router.post("", status_code=201, dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_booking(
    payload: Dict[str, Any] = Body(...),
    user: Optional[Dict[str, Any]] = Depends(optional_user),
):
    """
    Enregistre une réservation 'pending/pending' depuis le formulaire.
    - Entrée JSON: { adventureId, bookingDate, travelerName, email, phone, numberOfTravelers, specialRequests }
      (clés snake_case acceptées)
    - Prix recalculé côté serveur (catalogue live puis local), jamais lu depuis le client
    - Erreurs: 422 saisie invalide, 404 aventure inconnue, 502 échec d'écriture
    """
    stored = bookings_service.create_booking(payload, user_id=_user_id(user))
    return JSONResponse(status_code=201, content=stored.model_dump(mode="json"))

@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_booking_and_checkout(
    payload: Dict[str, Any] = Body(...),
    user: Optional[Dict[str, Any]] = Depends(optional_user),
    issuer: PaymentIntentIssuer = Depends(get_payment_issuer),
):
    """
    Parcours complet: réservation puis session Stripe Checkout.
    - Réponse: { booking: {...}, payment: { session_id, client_secret_or_session_url, amount, currency } }
    - Si Stripe échoue (502), la réservation reste 'pending' et peut être repayée via /{id}/checkout
    """
    result = payments_service.create_booking_and_checkout(payload, issuer, user_id=_user_id(user))
    return result.model_dump(mode="json")

@router.get("/{booking_id}")
def get_booking(booking_id: str, user: Optional[Dict[str, Any]] = Depends(optional_user)):
    """Retourne la réservation stockée; 403 si elle appartient à un autre compte."""
    return _load_owned(booking_id, user).model_dump(mode="json")

@router.post("/{booking_id}/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def checkout_existing_booking(
    booking_id: str,
    user: Optional[Dict[str, Any]] = Depends(optional_user),
    issuer: PaymentIntentIssuer = Depends(get_payment_issuer),
):
    _load_owned(booking_id, user)
    result = payments_service.start_checkout(booking_id, issuer)
    logger.info("checkout restarted booking_id=%s session_id=%s", booking_id, result.payment.session_id)
    return result.model_dump(mode="json")
