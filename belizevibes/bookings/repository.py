"""
Accès aux données pour la feature 'bookings' (Booking Store Gateway).
- create: insert unique et atomique, renvoie la ligne stockée.
- mark_confirmed: UPDATE conditionnel (status = 'pending'), seul garde-fou contre
  les doubles confirmations (webhooks dupliqués, rechargement de la page de succès).
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

import belizevibes.infra.supabase_client as supabase_client
from belizevibes.config import STORE_UPDATE_ATTEMPTS
from belizevibes.errors import PersistenceError
from .models import Booking, StoredBooking

logger = logging.getLogger(__name__)

BOOKINGS_TABLE = "bookings"
PAYMENT_SESSIONS_TABLE = "payment_sessions"

_idempotent_retry = retry(
    stop=stop_after_attempt(STORE_UPDATE_ATTEMPTS),
    wait=wait_exponential(multiplier=0.1, max=1),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def to_row(booking: Booking) -> Dict[str, Any]:
    """Sérialise une réservation vers les colonnes de la table 'bookings'."""
    row: Dict[str, Any] = {
        "adventure_id": booking.adventure_id,
        "booking_date": booking.booking_date.isoformat(),
        "lead_guest_name": booking.traveler_name,
        "lead_guest_email": booking.email,
        "lead_guest_phone": booking.phone,
        "participants": booking.number_of_travelers,
        "special_requests": booking.special_requests,
        "base_price": f"{booking.price_per_person:.2f}",
        "total_amount": f"{booking.total_amount:.2f}",
        "currency": booking.currency,
        "status": booking.status,
        "payment_status": booking.payment_status,
    }
    if booking.user_id:
        row["user_id"] = booking.user_id
    return row

def from_row(row: Dict[str, Any]) -> StoredBooking:
    """
    Reconstruit une StoredBooking depuis une ligne Supabase.
    Lève PersistenceError si la ligne viole les règles du modèle (ex: confirmed sans paiement).
    """
    try:
        return StoredBooking(
            id=str(row.get("id") or ""),
            adventure_id=str(row.get("adventure_id") or ""),
            booking_date=row.get("booking_date"),
            traveler_name=row.get("lead_guest_name") or "",
            email=row.get("lead_guest_email") or "",
            phone=row.get("lead_guest_phone") or "",
            number_of_travelers=int(row.get("participants") or 0),
            special_requests=row.get("special_requests"),
            price_per_person=Decimal(str(row.get("base_price") or 0)),
            total_amount=Decimal(str(row.get("total_amount") or 0)),
            currency=row.get("currency") or "usd",
            status=row.get("status") or "pending",
            payment_status=row.get("payment_status") or "pending",
            user_id=row.get("user_id"),
            created_at=row.get("created_at"),
            confirmed_at=row.get("confirmed_at"),
            payment_reference=row.get("payment_intent_id"),
        )
    except (PydanticValidationError, ValueError, TypeError) as e:
        logger.error("bookings.repository.from_row inconsistent row id=%s: %s", row.get("id"), e)
        raise PersistenceError("Stored booking is inconsistent") from e

def create(booking: Booking) -> StoredBooking:
    """
    Insère la réservation (service-role) et renvoie la ligne stockée.
    Pas de retry: l'insert n'est pas idempotent, l'utilisateur resoumet le formulaire.
    """
    try:
        res = supabase_client.get_service_supabase().table(BOOKINGS_TABLE).insert(to_row(booking)).execute()
        rows = res.data or []
    except Exception as e:
        logger.exception("bookings.repository.create failed adventure_id=%s", booking.adventure_id)
        raise PersistenceError("Failed to create booking") from e
    if not rows or not rows[0].get("id"):
        logger.error("bookings.repository.create returned no row adventure_id=%s", booking.adventure_id)
        raise PersistenceError("Failed to create booking")
    return from_row(rows[0])

@_idempotent_retry
def _select_booking(booking_id: str) -> Optional[Dict[str, Any]]:
    res = (
        supabase_client.get_service_supabase()
        .table(BOOKINGS_TABLE)
        .select("*")
        .eq("id", booking_id)
        .limit(1)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None

def get_booking(booking_id: str) -> Optional[StoredBooking]:
    """Lecture d'une réservation par id. None si absente; PersistenceError si Supabase échoue."""
    try:
        row = _select_booking(booking_id)
    except Exception as e:
        logger.exception("bookings.repository.get_booking failed id=%s", booking_id)
        raise PersistenceError("Failed to load booking") from e
    return from_row(row) if row else None

@_idempotent_retry
def _update_pending(booking_id: str, values: Dict[str, Any], payment_status: Optional[str] = None):
    query = (
        supabase_client.get_service_supabase()
        .table(BOOKINGS_TABLE)
        .update(values)
        .eq("id", booking_id)
        .eq("status", "pending")
    )
    if payment_status:
        query = query.eq("payment_status", payment_status)
    return query.execute()

def mark_confirmed(booking_id: str, payment_reference: Optional[str] = None) -> Optional[StoredBooking]:
    """
    Passe une réservation 'pending' en confirmed/paid en une seule requête conditionnelle.
    - Retourne la ligne mise à jour.
    - Retourne None si aucune ligne 'pending' ne correspond (absente ou déjà confirmée).
    - Rejouable sans risque (UPDATE idempotent); PersistenceError si Supabase échoue.
    """
    values: Dict[str, Any] = {
        "status": "confirmed",
        "payment_status": "paid",
        "confirmed_at": _now_iso(),
    }
    if payment_reference:
        values["payment_intent_id"] = payment_reference
    try:
        res = _update_pending(booking_id, values)
        rows = res.data or []
    except Exception as e:
        logger.exception("bookings.repository.mark_confirmed failed id=%s", booking_id)
        raise PersistenceError("Failed to confirm booking") from e
    return from_row(rows[0]) if rows else None

def mark_payment_failed(booking_id: str, payment_reference: Optional[str] = None) -> Optional[StoredBooking]:
    """
    Enregistre un échec de paiement signalé par Stripe (payment_status = 'failed').
    - Ne touche qu'aux réservations pending/pending: une réservation confirmée reste confirmée.
    - Le statut reste 'pending' (l'annulation n'est pas du ressort de ce flux).
    """
    values: Dict[str, Any] = {"payment_status": "failed"}
    if payment_reference:
        values["payment_intent_id"] = payment_reference
    try:
        res = _update_pending(booking_id, values, payment_status="pending")
        rows = res.data or []
    except Exception as e:
        logger.exception("bookings.repository.mark_payment_failed failed id=%s", booking_id)
        raise PersistenceError("Failed to update booking") from e
    return from_row(rows[0]) if rows else None

def record_payment_session(*, booking_id: str, session_id: str, amount: int, currency: str) -> bool:
    """
    Trace la session Stripe émise pour une réservation (table 'payment_sessions').
    Best effort: un échec est journalisé mais n'invalide pas le checkout.
    """
    try:
        (
            supabase_client.get_service_supabase()
            .table(PAYMENT_SESSIONS_TABLE)
            .insert({
                "booking_id": booking_id,
                "stripe_session_id": session_id,
                "amount": amount,
                "currency": currency,
                "status": "pending",
            })
            .execute()
        )
        return True
    except Exception:
        logger.exception("bookings.repository.record_payment_session failed booking_id=%s session_id=%s", booking_id, session_id)
        return False
