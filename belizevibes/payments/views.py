import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from belizevibes.errors import BookingError, PaymentProviderError
from belizevibes.payments import service as payments_service
from belizevibes.payments.stripe_client import PaymentIntentIssuer, get_payment_issuer

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

@router.get("/success")
def payment_success(
    booking: Optional[str] = None,
    session_id: Optional[str] = None,
    issuer: PaymentIntentIssuer = Depends(get_payment_issuer),
):
    """
    Page de retour Stripe: ?booking=<id>&session_id=<cs_...>
    - Confirme la réservation si la session Stripe est payée pour cette réservation
      (idempotent: un rechargement ne change rien); sans session_id, rien n'est confirmé
    - Répond toujours "success" à l'utilisateur: un problème de réconciliation est
      journalisé et sera rattrapé par le webhook
    """
    outcome = "unverified"
    try:
        result = payments_service.confirm_from_redirect(booking, session_id, issuer)
        outcome = result.outcome
    except BookingError as e:
        logger.warning("payment success reconciliation failed booking=%s session_id=%s: %s", booking, session_id, e.message)
    except Exception:
        logger.exception("payment success reconciliation crashed booking=%s session_id=%s", booking, session_id)
    return {"status": "success", "booking_id": booking, "outcome": outcome}

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, issuer: PaymentIntentIssuer = Depends(get_payment_issuer)):
    """
    Webhook Stripe.
    - Signature: Stripe-Signature + STRIPE_WEBHOOK_SECRET (400 si invalide)
    - Paiement réussi -> confirmation; échec -> payment_status 'failed'; autre -> ignoré
    - 502 si Supabase échoue: Stripe rejouera l'événement
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    try:
        event = issuer.parse_event(payload, signature)
    except PaymentProviderError as e:
        raise HTTPException(status_code=400, detail=e.message)

    result = await run_in_threadpool(payments_service.handle_event, event)
    logger.info("payments.webhook type=%s status=%s outcome=%s", result.get("type"), result.get("status"), result.get("outcome"))
    return JSONResponse(result)
