"""
Taxonomie des erreurs métier du backend.
Chaque erreur porte un statut HTTP et un 'kind' lisible par les clients;
backend.app_setup.exceptions les convertit en réponses JSON.
"""


class BookstoreError(Exception):
    status_code = 500
    kind = "internal"

    def __init__(self, message: str, code: str = "error"):
        super().__init__(message)
        self.message = message
        self.code = code


class GatewayError(BookstoreError):
    """Stripe injoignable ou requête refusée: le client peut réessayer."""
    status_code = 502
    kind = "gateway"


class NotFoundError(BookstoreError):
    status_code = 404
    kind = "not_found"


class UnauthorizedError(BookstoreError):
    status_code = 401
    kind = "unauthorized"


class ForbiddenError(BookstoreError):
    status_code = 403
    kind = "forbidden"


class ValidationError(BookstoreError):
    status_code = 400
    kind = "validation"


class ConflictError(BookstoreError):
    """Transition refusée par l'état courant du document."""
    status_code = 409
    kind = "conflict"


class StoreError(BookstoreError):
    """Base de données indisponible ou requête en échec."""
    status_code = 503
    kind = "store"
