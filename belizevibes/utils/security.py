from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

import belizevibes.infra.supabase_client as supabase_client

COOKIE_NAME = "sb_access"

def extract_token(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME) or None

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Résout un jeton via supabase.auth.get_user et retourne {id, email, token}."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None)
    if user is None:
        return {}
    return {"id": getattr(user, "id", None), "email": getattr(user, "email", None), "token": access_token}

def get_current_user(request: Request) -> Dict[str, Any]:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        user = get_user_from_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    if not user.get("id"):
        raise HTTPException(status_code=401, detail="Session expired, please sign in again")
    return user

def optional_user(request: Request) -> Optional[Dict[str, Any]]:
    """
    Identité facultative: la réservation est possible sans compte.
    Un jeton absent ou invalide donne None (pas de 401).
    """
    if not extract_token(request):
        return None
    try:
        return get_current_user(request)
    except HTTPException:
        return None
