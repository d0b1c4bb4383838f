# module belizevibes.app
from belizevibes.app_setup.factory import create_app

# App globale (PaymentConfig chargée depuis l'environnement au démarrage)
app = create_app()
