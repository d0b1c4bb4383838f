"""
Registre central des routers.
- API v1: bookings, payments, adventures (prix)
- Health: health_router
"""
from fastapi import FastAPI

from belizevibes.bookings import views as bookings_views
from belizevibes.catalog import views as catalog_views
from belizevibes.health.router import router as health_router
from belizevibes.payments import views as payments_views

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(bookings_views.router)
    app.include_router(payments_views.router)
    app.include_router(catalog_views.router)
    # Health & monitoring
    app.include_router(health_router)
