"""
Registre central des routers.
- Catalogue: books
- Commandes et factures: orders, invoices
- Paiement: payments (checkout Stripe + confirmation)
- Health
"""
from fastapi import FastAPI
from backend.books import views as books_views
from backend.orders import views as orders_views
from backend.invoices import views as invoices_views
from backend.payments import views as payments_views
from backend.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    app.include_router(books_views.router)
    app.include_router(orders_views.router)
    app.include_router(invoices_views.router)
    app.include_router(payments_views.router)
    app.include_router(health_router)
