"""
Factory d'application pour les entrypoints (belizevibes.asgi, tests).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI

from belizevibes.payments.config import PaymentConfig, load_payment_config
from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .routers import register_routers

def create_app(payment_config: Optional[PaymentConfig] = None) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - la PaymentConfig (chargée ici si non fournie; ConfigurationError si clé incohérente)
      - middlewares de base, gestionnaires d'exceptions, routers
    """
    app = FastAPI(title="BelizeVibes Booking API", lifespan=lifespan)
    app.state.payment_config = payment_config or load_payment_config()
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
