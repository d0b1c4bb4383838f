"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (uvicorn, gunicorn -k uvicorn.workers.UvicornWorker)
  importe `belizevibes.asgi:app`.
- Toute la configuration (routers, middlewares, Stripe) est centralisée dans
  belizevibes.app_setup.factory; ce fichier ne fait qu'exposer l'instance.
"""

from belizevibes.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "belizevibes.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
    )
