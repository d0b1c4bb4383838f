"""
Erreurs métier du parcours réservation -> paiement.
Chaque erreur porte un message lisible, renvoyé tel quel à l'appelant (UI).
Les handlers FastAPI (app_setup/exceptions.py) associent un code HTTP à chaque type.
"""

class BookingError(Exception):
    status_code = 400
    default_message = "Booking request failed"

    def __init__(self, message: str = "", code: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.code = code or self.__class__.__name__


class ValidationError(BookingError):
    """Saisie invalide (nombre de voyageurs, email, date). Jamais rejouée."""
    status_code = 422
    default_message = "Invalid booking request"

    def __init__(self, message: str = "", errors=None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(BookingError):
    """Aventure inconnue du catalogue live comme du catalogue local."""
    status_code = 404
    default_message = "Adventure not found"


class PersistenceError(BookingError):
    """Échec d'écriture/lecture côté Supabase (réseau, contrainte, RLS)."""
    status_code = 502
    default_message = "Failed to create booking"


class PaymentProviderError(BookingError):
    """Stripe injoignable ou requête refusée (montant, clés)."""
    status_code = 502
    default_message = "Failed to initialize payment"


class ReconciliationError(BookingError):
    """Identifiant de réservation absent ou mal formé lors de la confirmation."""
    status_code = 400
    default_message = "Invalid booking reference"


class ConfigurationError(BookingError):
    """Configuration incohérente détectée au démarrage (ex: clé test en mode live)."""
    status_code = 500
    default_message = "Invalid configuration"
