# belizevibes.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend BelizeVibes.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les URLs/clés Supabase
- Expose les variables brutes Stripe (le choix test/live est fait par
  belizevibes.payments.config.load_payment_config, au démarrage)
- Fournit les chemins de redirection du checkout et les réglages de retry
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return max(1, int(_clean_env(os.getenv(name) or "") or default))
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Environnement applicatif (production => Stripe en mode live par défaut)
APP_ENV = _clean_env(os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development").lower()

# Stripe: clés par mode + secret webhook
STRIPE_MODE = _clean_env(os.getenv("STRIPE_MODE") or "").lower()
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_SECRET_KEY_TEST = _clean_env(os.getenv("STRIPE_SECRET_KEY_TEST") or "")
STRIPE_SECRET_KEY_LIVE = _clean_env(os.getenv("STRIPE_SECRET_KEY_LIVE") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Devise unique du catalogue
PAYMENT_CURRENCY = (_clean_env(os.getenv("PAYMENT_CURRENCY") or "") or "usd").lower()

# Pages de succès/annulation du checkout (relatives à BASE_URL)
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
BOOKING_SUCCESS_PATH = os.getenv("BOOKING_SUCCESS_PATH", "/booking/success")
BOOKING_CANCEL_PATH = os.getenv("BOOKING_CANCEL_PATH", "/booking/cancel")

# Nombre de tentatives pour les appels idempotents vers Supabase
CATALOG_LOOKUP_ATTEMPTS = _int_env("CATALOG_LOOKUP_ATTEMPTS", 3)
STORE_UPDATE_ATTEMPTS = _int_env("STORE_UPDATE_ATTEMPTS", 3)

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
