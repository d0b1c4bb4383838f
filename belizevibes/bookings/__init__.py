"""
Module 'bookings': saisie, construction et persistance des réservations.
"""

from .models import Booking, BookingRequest, StoredBooking
from .builder import build_booking, compute_total
from .service import create_booking

__all__ = [
    "Booking",
    "BookingRequest",
    "StoredBooking",
    "build_booking",
    "compute_total",
    "create_booking",
]
