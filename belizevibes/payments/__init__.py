"""
Module 'payments' (feature-first): point d'entrée public.
Réunit configuration Stripe, conversion des montants, client Stripe, réconciliation et services.
"""

from .amounts import to_minor_units
from .config import PaymentConfig, load_payment_config
from .models import CheckoutResponse, PaymentIntent, ReconciliationResult
from .stripe_client import PaymentIntentIssuer, get_payment_issuer
from .reconciliation import confirm
from .service import (
    start_checkout,
    create_booking_and_checkout,
    handle_event,
    confirm_from_redirect,
)

__all__ = [
    # config
    "PaymentConfig",
    "load_payment_config",
    # montants
    "to_minor_units",
    # modèles
    "CheckoutResponse",
    "PaymentIntent",
    "ReconciliationResult",
    # stripe
    "PaymentIntentIssuer",
    "get_payment_issuer",
    # réconciliation
    "confirm",
    # services
    "start_checkout",
    "create_booking_and_checkout",
    "handle_event",
    "confirm_from_redirect",
]
