"""
Adaptateur Stripe (Payment Intent Issuer): centralise les appels Stripe.
- La clé est passée à chaque appel (api_key=...), jamais posée sur le module global.
- Aucune lecture d'environnement ici: tout vient de PaymentConfig.
"""
from decimal import Decimal
from typing import Any, Dict, Optional
from urllib.parse import urlencode
import json
import logging

import stripe
from fastapi import Request

from belizevibes.errors import PaymentProviderError
from .amounts import to_minor_units
from .config import PaymentConfig
from .models import PaymentIntent

logger = logging.getLogger(__name__)

def field(obj: Any, key: str, default: Any = None) -> Any:
    """Lecture tolérante d'un champ sur un dict ou un StripeObject."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(key, default)
    else:
        value = getattr(obj, key, default)
    return default if value is None else value

def _with_query(url: str, params: Dict[str, str], raw_suffix: str = "") -> str:
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{urlencode(params)}{raw_suffix}"


class PaymentIntentIssuer:
    """Émet les sessions Checkout et vérifie les événements Stripe pour une PaymentConfig donnée."""

    def __init__(self, payment_config: PaymentConfig):
        self.config = payment_config

    def _require_key(self) -> str:
        if not self.config.secret_key:
            logger.error("stripe secret key missing (mode=%s)", self.config.mode)
            raise PaymentProviderError("Payment provider is not configured")
        return self.config.secret_key

    def issue_intent(
        self,
        booking_id: str,
        amount: Decimal,
        currency: Optional[str] = None,
        customer_email: Optional[str] = None,
        description: str = "",
    ) -> PaymentIntent:
        """
        Crée une session Checkout pour une réservation existante.
        - amount: total décimal (ex: 200.00), converti en unités mineures (20000)
        - metadata.booking_id + client_reference_id: permettent la réconciliation (webhook, page de succès)
        - success_url: <BOOKING_SUCCESS_PATH>?booking=<id>&session_id={CHECKOUT_SESSION_ID}
        Lève PaymentProviderError si montant <= 0, clé absente, ou refus/indisponibilité Stripe.
        Ne modifie jamais la réservation.
        """
        currency = (currency or self.config.currency or "usd").lower()
        if amount is None or Decimal(str(amount)) <= 0:
            raise PaymentProviderError("Payment amount must be greater than zero")
        minor = to_minor_units(amount, currency)
        if minor <= 0:
            raise PaymentProviderError("Payment amount must be greater than zero")
        api_key = self._require_key()

        success_url = _with_query(
            self.config.success_url, {"booking": booking_id}, "&session_id={CHECKOUT_SESSION_ID}"
        )
        cancel_url = _with_query(self.config.cancel_url, {"booking": booking_id})
        metadata = {"booking_id": booking_id}
        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{
                "price_data": {
                    "currency": currency,
                    "unit_amount": minor,
                    "product_data": {"name": description or f"BelizeVibes booking {booking_id}"},
                },
                "quantity": 1,
            }],
            "metadata": metadata,
            "payment_intent_data": {"metadata": metadata},
            "client_reference_id": booking_id,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(api_key=api_key, **params)
        except Exception as e:
            logger.exception("stripe checkout session failed booking_id=%s amount=%s %s", booking_id, minor, currency)
            raise PaymentProviderError("Failed to initialize payment") from e

        session_id = field(session, "id", "")
        url = field(session, "url", "") or field(session, "client_secret", "")
        if not session_id or not url:
            logger.error("stripe returned an incomplete session booking_id=%s", booking_id)
            raise PaymentProviderError("Failed to initialize payment")

        logger.info("stripe session created booking_id=%s session_id=%s amount=%s %s mode=%s",
                    booking_id, session_id, minor, currency, self.config.mode)
        return PaymentIntent(
            booking_id=booking_id,
            session_id=session_id,
            client_secret_or_session_url=url,
            amount=minor,
            currency=currency,
        )

    def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        """
        Récupère une session Checkout et la normalise en dict:
        {id, payment_status, status, booking_id, payment_intent}.
        """
        if not session_id:
            raise PaymentProviderError("Missing Stripe session id")
        api_key = self._require_key()
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=api_key)
        except Exception as e:
            logger.exception("stripe session retrieve failed session_id=%s", session_id)
            raise PaymentProviderError("Failed to verify payment") from e
        metadata = field(session, "metadata", {}) or {}
        return {
            "id": field(session, "id", session_id),
            "payment_status": field(session, "payment_status", ""),
            "status": field(session, "status", ""),
            "booking_id": field(metadata, "booking_id", "") or field(session, "client_reference_id", ""),
            "payment_intent": field(session, "payment_intent", None),
        }

    def parse_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Valide la signature d'un webhook (Stripe-Signature + secret) et retourne l'événement en dict.
        Lève PaymentProviderError si le secret manque ou si la signature/le payload est invalide.
        """
        if not self.config.webhook_secret:
            logger.error("stripe webhook received but STRIPE_WEBHOOK_SECRET is not configured")
            raise PaymentProviderError("Webhook secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature or "", self.config.webhook_secret)
            return json.loads(payload)
        except Exception as e:
            logger.warning("stripe webhook rejected: %s", e)
            raise PaymentProviderError("Invalid Stripe webhook payload") from e

def get_payment_issuer(request: Request) -> PaymentIntentIssuer:
    """Dépendance FastAPI: issuer construit sur la PaymentConfig chargée au démarrage (app.state)."""
    issuer = getattr(request.app.state, "payment_issuer", None)
    if issuer is None:
        payment_config = getattr(request.app.state, "payment_config", None)
        if payment_config is None:
            raise PaymentProviderError("Payment provider is not configured")
        issuer = PaymentIntentIssuer(payment_config)
        request.app.state.payment_issuer = issuer
    return issuer
