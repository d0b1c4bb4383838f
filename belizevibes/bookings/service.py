"""
Cas d'usage 'bookings': orchestre catalog (prix), builder (validation) et repository (Supabase).
Les étapes sont séquentielles: la réservation n'existe qu'une fois l'insert confirmé.
"""
from typing import Any, Dict, Optional, Union
import logging

from belizevibes.catalog import service as catalog_service
from belizevibes.errors import ValidationError
from . import builder
from . import repository
from .models import BookingRequest, StoredBooking

logger = logging.getLogger(__name__)

def create_booking(
    payload: Union[BookingRequest, Dict[str, Any]],
    user_id: Optional[str] = None,
) -> StoredBooking:
    """
    Crée une réservation 'pending/pending' à partir du formulaire.
    1) Valide la saisie (ValidationError avant tout appel réseau)
    2) Résout le prix faisant foi (NotFoundError si aventure inconnue)
    3) Construit la réservation (total = prix x voyageurs)
    4) Persiste (PersistenceError si Supabase refuse)
    """
    request = builder.parse_request(payload)
    quote = catalog_service.resolve_price(request.adventure_id)
    booking = builder.build_booking(request, quote, user_id=user_id)
    stored = repository.create(booking)
    logger.info(
        "booking created id=%s adventure_id=%s travelers=%s total=%s source=%s",
        stored.id, stored.adventure_id, stored.number_of_travelers, stored.total_amount, quote.source,
    )
    return stored

def get_booking(booking_id: str) -> Optional[StoredBooking]:
    if not booking_id or not str(booking_id).strip():
        raise ValidationError("Booking id is required")
    return repository.get_booking(str(booking_id).strip())
