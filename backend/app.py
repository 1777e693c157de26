# module backend.app
"""
Instance ASGI globale de l'application (construite par la factory).
"""
from backend.app_setup.factory import create_app

app = create_app()
