"""
Accès aux données pour la feature 'catalog' (table Supabase 'adventures').
"""
from typing import Any, Dict, Optional
import logging

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

import belizevibes.infra.supabase_client as supabase_client
from belizevibes.config import CATALOG_LOOKUP_ATTEMPTS

logger = logging.getLogger(__name__)

ADVENTURE_COLUMNS = "id, title, price_per_person, is_active"

# module belizevibes.catalog.repository
@retry(
    stop=stop_after_attempt(CATALOG_LOOKUP_ATTEMPTS),
    wait=wait_exponential(multiplier=0.1, max=1),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
def _select_adventure(adventure_id: str) -> Optional[Dict[str, Any]]:
    res = (
        supabase_client.get_supabase()
        .table("adventures")
        .select(ADVENTURE_COLUMNS)
        .eq("id", adventure_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    rows = res.data or []
    return rows[0] if rows else None

def fetch_adventure(adventure_id: str) -> Optional[Dict[str, Any]]:
    """
    Lecture live d'une aventure active par identifiant.
    - Les erreurs réseau sont rejouées (lecture idempotente) avant abandon.
    - Retourne None si l'aventure est absente ou en cas d'erreur (le service bascule alors sur le catalogue local).
    """
    if not adventure_id:
        return None
    try:
        return _select_adventure(adventure_id)
    except Exception:
        logger.exception("catalog.repository.fetch_adventure failed adventure_id=%s", adventure_id)
        return None
