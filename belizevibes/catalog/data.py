"""
Catalogue local (lecture seule) des aventures BelizeVibes.
Consulté uniquement quand la table Supabase 'adventures' ne connaît pas l'identifiant
ou que la lecture échoue. Les prix sont des chaînes d'affichage ("$149").
"""
from typing import Any, Dict, List, Optional

LOCAL_ID_PREFIX = "local-"

ADVENTURES: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "Cave Tubing & Jungle Trek",
        "price": "$149",
        "duration": "Full Day",
        "groupSize": "4-8 people",
        "location": "Cayo District",
    },
    {
        "id": 2,
        "title": "Snorkeling at Hol Chan",
        "price": "$89",
        "duration": "Half Day",
        "groupSize": "6-12 people",
        "location": "Ambergris Caye",
    },
    {
        "id": 3,
        "title": "Caracol Maya Ruins Adventure",
        "price": "$199",
        "duration": "Full Day",
        "groupSize": "4-10 people",
        "location": "Chiquibul Forest",
    },
    {
        "id": 4,
        "title": "Blue Hole Diving Experience",
        "price": "$299",
        "duration": "Full Day",
        "groupSize": "4-8 people",
        "location": "Lighthouse Reef",
    },
    {
        "id": 5,
        "title": "Jungle Zip-lining & Waterfall",
        "price": "$119",
        "duration": "Half Day",
        "groupSize": "6-12 people",
        "location": "Mountain Pine Ridge",
    },
    {
        "id": 6,
        "title": "Manatee Watching & Beach Day",
        "price": "$129",
        "duration": "Full Day",
        "groupSize": "4-10 people",
        "location": "Placencia",
    },
]

def find_local_adventure(adventure_id: str, catalog: Optional[List[Dict[str, Any]]] = None) -> Optional[Dict[str, Any]]:
    """
    Recherche une aventure locale par identifiant.
    - Accepte l'id brut ("3") ou la forme préfixée utilisée par le front ("local-3").
    """
    key = str(adventure_id or "").strip()
    if key.startswith(LOCAL_ID_PREFIX):
        key = key[len(LOCAL_ID_PREFIX):]
    if not key:
        return None
    for adventure in (ADVENTURES if catalog is None else catalog):
        if str(adventure.get("id")) == key:
            return adventure
    return None
