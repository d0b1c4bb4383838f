from fastapi import APIRouter

from belizevibes.catalog.service import resolve_price

router = APIRouter(prefix="/api/v1/adventures", tags=["Adventures API"])

@router.get("/{adventure_id}/price")
def get_adventure_price(adventure_id: str):
    """
    Retourne le devis unitaire {adventure_id, price_per_person, source, title}.
    - 404 (NotFoundError) si l'aventure est inconnue des deux catalogues.
    """
    quote = resolve_price(adventure_id)
    return quote.model_dump(mode="json")
