from decimal import Decimal
from typing import Literal

from pydantic import BaseModel

class PriceQuote(BaseModel):
    """Prix unitaire faisant foi pour une tentative de réservation (non persisté)."""
    adventure_id: str
    price_per_person: Decimal
    source: Literal["catalog", "fallback"]
    title: str = ""
