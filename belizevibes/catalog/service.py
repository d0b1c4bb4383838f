"""
Résolution du prix d'une aventure (Price Resolver).
Ordre: catalogue live Supabase, puis catalogue local. Lecture seule.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging
import re

from belizevibes.errors import NotFoundError
from . import data
from . import repository
from .models import PriceQuote

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

def parse_price(value: Any) -> Optional[Decimal]:
    """
    Convertit une représentation de prix en Decimal (2 décimales).
    - Accepte int/float/Decimal ou chaîne d'affichage ("$149", "1,299.50 USD").
    - Retourne None si la valeur est vide, illisible ou négative.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        raw = re.sub(r"[^0-9.\-]", "", str(value))
    if not raw:
        return None
    try:
        price = Decimal(raw).quantize(CENT)
    except InvalidOperation:
        return None
    if price < 0:
        return None
    return price

def _fallback_quote(adventure_id: str) -> Optional[PriceQuote]:
    local = data.find_local_adventure(adventure_id)
    if not local:
        return None
    price = parse_price(local.get("price"))
    if price is None:
        logger.warning("catalog fallback price unreadable adventure_id=%s price=%r", adventure_id, local.get("price"))
        return None
    return PriceQuote(
        adventure_id=adventure_id,
        price_per_person=price,
        source="fallback",
        title=local.get("title") or "",
    )

def resolve_price(adventure_id: str) -> PriceQuote:
    """
    Détermine le prix par personne faisant foi.
    - Live: table 'adventures' (price_per_person) via repository.fetch_adventure.
    - Fallback: catalogue local (prix chaîne "$149") si live absent, en erreur ou sans prix.
    - Le live l'emporte toujours; un écart avec le local est seulement journalisé.
    Lève NotFoundError si aucune source ne connaît l'identifiant.
    """
    adventure_id = str(adventure_id or "").strip()
    if not adventure_id:
        raise NotFoundError("Adventure not found")

    row = repository.fetch_adventure(adventure_id)
    if row:
        price = parse_price(row.get("price_per_person"))
        if price is not None and price > 0:
            quote = PriceQuote(
                adventure_id=adventure_id,
                price_per_person=price,
                source="catalog",
                title=row.get("title") or "",
            )
            fallback = _fallback_quote(adventure_id)
            if fallback and fallback.price_per_person != price:
                # Pas de réconciliation: on trace l'écart pour les opérations
                logger.warning(
                    "catalog price mismatch adventure_id=%s live=%s fallback=%s",
                    adventure_id, price, fallback.price_per_person,
                )
            return quote
        logger.warning("catalog live row without usable price adventure_id=%s", adventure_id)

    quote = _fallback_quote(adventure_id)
    if quote:
        logger.info("catalog fallback used adventure_id=%s price=%s", adventure_id, quote.price_per_person)
        return quote

    logger.info("adventure not found in any catalog adventure_id=%s", adventure_id)
    raise NotFoundError("Adventure not found")
