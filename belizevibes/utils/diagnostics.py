# module belizevibes.utils.diagnostics
"""
Instantané de configuration pour le support (aucun secret affiché).

Usage:
    python -m belizevibes.utils.diagnostics
"""
import json
from typing import Any, Dict, Optional

from belizevibes import config
from belizevibes.catalog.data import ADVENTURES
from belizevibes.payments.config import PaymentConfig

def mask(value: Optional[str], keep: int = 8) -> Optional[str]:
    """Garde le préfixe (ex: 'sk_test_') et masque le reste."""
    if not value:
        return None
    return value[:keep] + "..." if len(value) > keep else "***"

def collect_diagnostics(payment_config: PaymentConfig) -> Dict[str, Any]:
    return {
        "app_env": config.APP_ENV,
        "supabase": {
            "url_configured": bool(config.SUPABASE_URL),
            "url": config.SUPABASE_URL or None,
            "anon_key_present": bool(config.SUPABASE_ANON),
            "service_key_present": bool(config.SUPABASE_SERVICE_KEY),
        },
        "stripe": {
            "mode": payment_config.mode,
            "key_present": payment_config.is_configured,
            "key_source": payment_config.credential_source or None,
            "key_prefix": mask(payment_config.secret_key),
            "webhook_secret_present": bool(payment_config.webhook_secret),
            "currency": payment_config.currency,
            "success_url": payment_config.success_url,
            "cancel_url": payment_config.cancel_url,
        },
        "catalog": {"fallback_adventures": len(ADVENTURES)},
    }

if __name__ == "__main__":
    from belizevibes.payments.config import load_payment_config

    print(json.dumps(collect_diagnostics(load_payment_config()), indent=2))
