"""
Module 'catalog': résolution du prix d'une aventure (live Supabase puis catalogue local).
"""

from .models import PriceQuote
from .service import parse_price, resolve_price

__all__ = [
    "PriceQuote",
    "parse_price",
    "resolve_price",
]
