from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from belizevibes.health.service import health_supabase_info
from belizevibes.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root(request: Request):
    payment_config = getattr(request.app.state, "payment_config", None)
    return {
        "ok": True,
        "stripe_mode": payment_config.mode if payment_config else None,
        "rate_limit": rate_limit_health_info(request),
    }

@router.get("/supabase")
def health_supabase():
    return JSONResponse(health_supabase_info())
