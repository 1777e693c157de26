"""
Accès au catalogue (table BOOKS_TABLE).
Opérations mono-document; le pipeline de paiement n'utilise que get_book.
"""
from typing import Any, Dict, List, Optional
import logging
from postgrest.exceptions import APIError

from backend.config import BOOKS_TABLE
from backend.infra.supabase_client import Database, first_row, api_error_code
from backend.utils.errors import StoreError

logger = logging.getLogger(__name__)

PUBLISHED = "published"


def get_book(db: Database, book_id: str) -> Optional[Dict[str, Any]]:
    if not book_id:
        return None
    try:
        res = db.table(BOOKS_TABLE).select("*").eq("id", book_id).limit(1).execute()
    except APIError as e:
        if api_error_code(e) == "22P02":
            return None
        logger.exception("books.repository.get_book failed id=%s", book_id)
        raise StoreError("Lecture du livre impossible", code="book_read_failed") from e
    except Exception as e:
        logger.exception("books.repository.get_book failed id=%s", book_id)
        raise StoreError("Lecture du livre impossible", code="book_read_failed") from e
    return first_row(res)


def list_published(db: Database) -> List[Dict[str, Any]]:
    try:
        res = db.table(BOOKS_TABLE).select("*").eq("status", PUBLISHED).execute()
    except Exception as e:
        logger.exception("books.repository.list_published failed")
        raise StoreError("Lecture du catalogue impossible", code="books_read_failed") from e
    return res.data or []


def list_latest(db: Database, limit: int = 6) -> List[Dict[str, Any]]:
    try:
        res = (
            db.table(BOOKS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("books.repository.list_latest failed")
        raise StoreError("Lecture du catalogue impossible", code="books_read_failed") from e
    return res.data or []


def insert_book(db: Database, data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        res = db.table(BOOKS_TABLE).insert(data).execute()
    except Exception as e:
        logger.exception("books.repository.insert_book failed title=%s", data.get("title"))
        raise StoreError("Echec de création du livre", code="book_insert_failed") from e
    return first_row(res) or data
