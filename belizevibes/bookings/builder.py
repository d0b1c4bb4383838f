"""
Construction pure d'une réservation (pas de DB, pas de Stripe).
"""
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from belizevibes.catalog.models import PriceQuote
from belizevibes.config import PAYMENT_CURRENCY
from belizevibes.errors import ValidationError
from .models import Booking, BookingRequest

CENT = Decimal("0.01")

_FIELD_MESSAGES = {
    "number_of_travelers": "Number of travelers must be at least 1",
    "email": "A valid email address is required",
    "booking_date": "Booking date must be a valid calendar date",
    "adventure_id": "Adventure is required",
}

def _first_message(exc: PydanticValidationError) -> str:
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = loc[0] if loc else ""
        for name, message in _FIELD_MESSAGES.items():
            if field in (name, to_camel(name)):
                return message
    return "Invalid booking request"

def parse_request(payload: Union[BookingRequest, Dict[str, Any]]) -> BookingRequest:
    """
    Valide la saisie du formulaire.
    - Accepte un BookingRequest déjà construit ou un dict (clés camelCase ou snake_case).
    - Convertit les erreurs pydantic en ValidationError métier (message lisible + détails).
    """
    if isinstance(payload, BookingRequest):
        return payload
    try:
        return BookingRequest.model_validate(payload or {})
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc") or ()), "message": err.get("msg")}
            for err in e.errors()
        ]
        raise ValidationError(_first_message(e), errors=errors) from e

def compute_total(price_per_person: Decimal, number_of_travelers: int) -> Decimal:
    """Total exact en Decimal, arrondi au centime."""
    return (Decimal(price_per_person) * int(number_of_travelers)).quantize(CENT)

def build_booking(
    payload: Union[BookingRequest, Dict[str, Any]],
    quote: PriceQuote,
    *,
    user_id: Optional[str] = None,
    currency: str = PAYMENT_CURRENCY,
) -> Booking:
    """
    Construit une réservation validée à partir de la saisie et du devis.
    - Règles: voyageurs >= 1, email plausible, date calendaire valide, devis de la même aventure.
    - total_amount = price_per_person * number_of_travelers.
    - État initial: pending/pending. Aucune persistance ici.
    """
    request = parse_request(payload)
    if quote.adventure_id != request.adventure_id:
        raise ValidationError("Price quote does not match the requested adventure")
    if quote.price_per_person <= 0:
        raise ValidationError("Adventure has no bookable price")

    return Booking(
        adventure_id=request.adventure_id,
        booking_date=request.booking_date,
        traveler_name=request.traveler_name,
        email=str(request.email),
        phone=request.phone,
        number_of_travelers=request.number_of_travelers,
        special_requests=request.special_requests or None,
        price_per_person=quote.price_per_person,
        total_amount=compute_total(quote.price_per_person, request.number_of_travelers),
        currency=(currency or "usd").lower(),
        status="pending",
        payment_status="pending",
        user_id=user_id,
    )
