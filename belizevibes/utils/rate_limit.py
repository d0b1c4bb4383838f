from typing import Any, Dict
from urllib.parse import urlparse
import hashlib
import os
import time

from fastapi import HTTPException, Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

from belizevibes.utils.security import COOKIE_NAME

def _client_key(request: Request) -> str:
    # Priorité: session cookie (hashé) puis IP
    token = request.cookies.get(COOKIE_NAME)
    path = request.url.path
    if token:
        h = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"user:{h}:{path}"
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{path}"

def _local_hit(request: Request, times: int, seconds: int) -> None:
    now = time.time()
    key = _client_key(request)
    # store: clé -> (fenêtre en secondes, horodatages)
    store = getattr(request.app.state, "_rl_store", {})
    for other, (window, stamps) in list(store.items()):
        if not stamps or now - stamps[-1] >= window:
            del store[other]
    _, previous = store.get(key, (seconds, []))
    hits = [t for t in previous if now - t < seconds]
    if len(hits) >= times:
        store[key] = (seconds, hits)
        request.app.state._rl_store = store
        raise HTTPException(status_code=429, detail="Too Many Requests")
    hits.append(now)
    store[key] = (seconds, hits)
    request.app.state._rl_store = store

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de limitation de débit (création de réservation, checkout).
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev, tests)
    - sinon fastapi-limiter (Redis) si le lifespan l'a initialisé
    - limiter indisponible: pas de 429
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            _local_hit(request, times, seconds)
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        async def _identifier(req: Request) -> str:
            return _client_key(req)

        try:
            limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)
            return await limiter(request, response)
        except HTTPException:
            raise
        except Exception:
            return
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": "redis" if limiter_ready else None,
        "local_fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }
    redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
    if limiter_ready and redis_url:
        p = urlparse(redis_url)
        info["redis"] = {"scheme": p.scheme, "host": p.hostname, "port": p.port}
    return info
