"""
Réconciliation paiement -> réservation (pending -> confirmed/paid).
Rejouable: une seconde confirmation (webhook dupliqué, page de succès rechargée) ne change rien.
"""
from typing import Optional
import logging
import re

from belizevibes.bookings import repository
from belizevibes.errors import ReconciliationError
from .models import ReconciliationResult

logger = logging.getLogger(__name__)

BOOKING_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

def validate_booking_id(booking_id: Optional[str]) -> str:
    """Refuse un identifiant absent, vide ou hors du format attendu (uuid, slug)."""
    value = (booking_id or "").strip() if isinstance(booking_id, str) else ""
    if not value or not BOOKING_ID_PATTERN.match(value):
        raise ReconciliationError("Invalid booking reference")
    return value

def confirm(booking_id: Optional[str], payment_reference: Optional[str] = None) -> ReconciliationResult:
    """
    Confirme une réservation payée.
    - confirmed: la ligne était 'pending' et vient de passer confirmed/paid
    - already_confirmed: la ligne était déjà confirmed/paid (aucune écriture)
    - not_found_or_already_confirmed: aucune ligne 'pending' et pas de confirmation visible
    Lève ReconciliationError (id invalide) ou PersistenceError (Supabase).
    """
    booking_id = validate_booking_id(booking_id)

    updated = repository.mark_confirmed(booking_id, payment_reference=payment_reference)
    if updated:
        logger.info("booking confirmed id=%s reference=%s", booking_id, payment_reference)
        return ReconciliationResult(booking_id=booking_id, outcome="confirmed", booking=updated)

    current = repository.get_booking(booking_id)
    if current and current.status == "confirmed" and current.payment_status == "paid":
        logger.info("booking already confirmed id=%s", booking_id)
        return ReconciliationResult(booking_id=booking_id, outcome="already_confirmed", booking=current)

    logger.warning(
        "booking not confirmable id=%s state=%s",
        booking_id, f"{current.status}/{current.payment_status}" if current else "missing",
    )
    return ReconciliationResult(booking_id=booking_id, outcome="not_found_or_already_confirmed", booking=current)
