# module backend.books.views
"""Endpoints du catalogue (frontière du pipeline de paiement).
- POST /books: ajout d'un livre (admin ou bibliothécaire).
- GET /books: livres publiés; GET /books-limit: 6 derniers; GET /books/{id}: détail.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from backend.books import repository as books_repository
from backend.infra.supabase_client import Database, get_db
from backend.utils.errors import NotFoundError, ValidationError
from backend.utils.security import require_staff

router = APIRouter(tags=["Books API"])


class BookIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str = Field(..., min_length=1)
    price: str
    quantity: int = 0
    status: str = books_repository.PUBLISHED
    librarian_email: Optional[str] = None


@router.post("/books")
def create_book(payload: BookIn, db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_staff)):
    """Ajoute un livre. Le bibliothécaire responsable est l'auteur de la requête par défaut."""
    try:
        price = Decimal(payload.price)
    except InvalidOperation:
        raise ValidationError("Prix invalide", code="invalid_price")
    # NaN/Infinity: jamais réglables via Stripe
    if not price.is_finite() or price <= 0:
        raise ValidationError("Prix invalide", code="invalid_price")
    data = payload.model_dump()
    data["title"] = payload.title.strip()
    data["price"] = f"{price:.2f}"
    data["librarian_email"] = payload.librarian_email or user.get("email")
    return books_repository.insert_book(db, data)


@router.get("/books")
def list_books(db: Database = Depends(get_db)):
    return books_repository.list_published(db)


@router.get("/books-limit")
def list_latest_books(db: Database = Depends(get_db)):
    return books_repository.list_latest(db, limit=6)


@router.get("/books/{book_id}")
def get_book(book_id: str, db: Database = Depends(get_db)):
    book = books_repository.get_book(db, book_id)
    if not book:
        raise NotFoundError("Livre introuvable", code="book_not_found")
    return book
