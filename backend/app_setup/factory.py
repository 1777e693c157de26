"""
Factory d'application pour les entrypoints (backend.asgi, backend.__main__) et les tests.
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exceptions import register_exception_handlers
from .routes import register_routes
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares (CORS, proxy, en-têtes de sécurité)
      - gestionnaires d'exceptions (erreurs métier -> JSON {detail, kind, code})
      - route racine et tous les routers (catalogue, commandes, factures, paiements, health)
    """
    app = FastAPI(title="Bookstore API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
