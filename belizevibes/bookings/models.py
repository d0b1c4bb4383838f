# module belizevibes.bookings.models
"""Modèles de la feature 'bookings'.
- BookingRequest: saisie du formulaire de réservation (clés camelCase ou snake_case acceptées).
- Booking: réservation construite et validée, prête à être persistée.
- StoredBooking: représentation renvoyée par la base (id, horodatages).
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

BookingStatus = Literal["pending", "confirmed", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed"]

def check_status_invariant(status: str, payment_status: str) -> None:
    """Une réservation 'confirmed' est toujours 'paid'."""
    if status == "confirmed" and payment_status != "paid":
        raise ValueError(f"status=confirmed requires payment_status=paid (got {payment_status})")


class BookingRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    adventure_id: str = Field(min_length=1)
    booking_date: date
    traveler_name: str = ""
    email: EmailStr
    phone: str = ""
    number_of_travelers: int = Field(ge=1)
    special_requests: Optional[str] = None


class Booking(BaseModel):
    adventure_id: str
    booking_date: date
    traveler_name: str = ""
    email: str
    phone: str = ""
    number_of_travelers: int = Field(ge=1)
    special_requests: Optional[str] = None
    price_per_person: Decimal
    total_amount: Decimal
    currency: str = "usd"
    status: BookingStatus = "pending"
    payment_status: PaymentStatus = "pending"
    user_id: Optional[str] = None

    @model_validator(mode="after")
    def _status_invariant(self):
        check_status_invariant(self.status, self.payment_status)
        return self


class StoredBooking(Booking):
    id: str
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    payment_reference: Optional[str] = None
