"""
Configuration Stripe figée au démarrage (PaymentConfig).
- Choisit le mode (test/live) et la clé correspondante.
- Refuse une clé de test en live, une clé live en test, et tout format inconnu.
- Seul endroit (avec belizevibes.config) qui lit l'environnement pour Stripe.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from belizevibes import config
from belizevibes.errors import ConfigurationError

PaymentMode = Literal["test", "live"]

_KEY_PREFIXES = {
    "test": ("sk_test_", "rk_test_"),
    "live": ("sk_live_", "rk_live_"),
}


class PaymentConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: PaymentMode = "test"
    secret_key: str = ""
    credential_source: str = ""
    webhook_secret: str = ""
    currency: str = "usd"
    success_url: str = ""
    cancel_url: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)


def resolve_mode(mode: str = "", app_env: str = "") -> PaymentMode:
    """STRIPE_MODE explicite, sinon 'live' en production et 'test' ailleurs."""
    mode = (mode or "").strip().lower()
    if mode in ("test", "live"):
        return mode  # type: ignore[return-value]
    if mode:
        raise ConfigurationError(f"Unknown STRIPE_MODE '{mode}' (expected 'test' or 'live')")
    return "live" if (app_env or "").strip().lower() == "production" else "test"

def check_secret_key(mode: PaymentMode, secret_key: str) -> None:
    """
    Vérifie que la clé correspond au mode.
    Clé vide acceptée: le checkout échouera proprement (PaymentProviderError) à l'usage.
    """
    if not secret_key:
        return
    if secret_key.startswith(_KEY_PREFIXES[mode]):
        return
    other = "test" if mode == "live" else "live"
    if secret_key.startswith(_KEY_PREFIXES[other]):
        raise ConfigurationError(f"Stripe {other} key configured while running in {mode} mode")
    raise ConfigurationError("Invalid Stripe secret key format")

def build_redirect_url(base_url: str, path: str) -> str:
    base = (base_url or "").rstrip("/")
    if not path:
        return base
    return f"{base}/{path.lstrip('/')}"

def load_payment_config(
    *,
    mode: Optional[str] = None,
    app_env: Optional[str] = None,
) -> PaymentConfig:
    """
    Construit la PaymentConfig à partir de belizevibes.config.
    - Clé: STRIPE_SECRET_KEY_<MODE> puis STRIPE_SECRET_KEY (générique).
    - credential_source garde le nom de la variable retenue (jamais la clé).
    Lève ConfigurationError si la clé ne correspond pas au mode.
    """
    resolved = resolve_mode(config.STRIPE_MODE if mode is None else mode,
                            config.APP_ENV if app_env is None else app_env)
    specific_name = f"STRIPE_SECRET_KEY_{resolved.upper()}"
    specific = config.STRIPE_SECRET_KEY_LIVE if resolved == "live" else config.STRIPE_SECRET_KEY_TEST
    if specific:
        secret_key, source = specific, specific_name
    elif config.STRIPE_SECRET_KEY:
        secret_key, source = config.STRIPE_SECRET_KEY, "STRIPE_SECRET_KEY"
    else:
        secret_key, source = "", ""

    check_secret_key(resolved, secret_key)

    return PaymentConfig(
        mode=resolved,
        secret_key=secret_key,
        credential_source=source,
        webhook_secret=config.STRIPE_WEBHOOK_SECRET,
        currency=config.PAYMENT_CURRENCY,
        success_url=build_redirect_url(config.BASE_URL, config.BOOKING_SUCCESS_PATH),
        cancel_url=build_redirect_url(config.BASE_URL, config.BOOKING_CANCEL_PATH),
    )
