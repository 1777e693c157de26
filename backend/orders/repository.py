"""
Accès aux données des commandes (table ORDERS_TABLE).
Chaque écriture est une mise à jour mono-document et rejouable sans effet de bord.
"""
from typing import Any, Dict, List, Optional
import logging
from postgrest.exceptions import APIError

from backend.config import ORDERS_TABLE
from backend.infra.supabase_client import Database, first_row, api_error_code
from backend.orders.models import PAYMENT_PAID
from backend.utils.errors import StoreError

logger = logging.getLogger(__name__)

# Identifiant mal formé (ex: uuid invalide) -> traité comme introuvable
INVALID_TEXT_REPRESENTATION = "22P02"


# module backend.orders.repository
def insert_order(db: Database, data: Dict[str, Any]) -> Dict[str, Any]:
    try:
        res = db.table(ORDERS_TABLE).insert(data).execute()
    except Exception as e:
        logger.exception("orders.repository.insert_order failed book_id=%s", data.get("book_id"))
        raise StoreError("Echec de création de la commande", code="order_insert_failed") from e
    return first_row(res) or data


def get_order(db: Database, order_id: str) -> Optional[Dict[str, Any]]:
    if not order_id:
        return None
    try:
        res = db.table(ORDERS_TABLE).select("*").eq("id", order_id).limit(1).execute()
    except APIError as e:
        if api_error_code(e) == INVALID_TEXT_REPRESENTATION:
            return None
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        raise StoreError("Lecture de la commande impossible", code="order_read_failed") from e
    except Exception as e:
        logger.exception("orders.repository.get_order failed id=%s", order_id)
        raise StoreError("Lecture de la commande impossible", code="order_read_failed") from e
    return first_row(res)


def _find_by(db: Database, column: str, email: str) -> List[Dict[str, Any]]:
    try:
        res = (
            db.table(ORDERS_TABLE)
            .select("*")
            .eq(column, email)
            .order("ordered_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.find_by_%s failed", column)
        raise StoreError("Lecture des commandes impossible", code="orders_read_failed") from e
    return res.data or []


def find_by_owner(db: Database, email: str) -> List[Dict[str, Any]]:
    return _find_by(db, "email", email)


def find_by_fulfiller(db: Database, email: str) -> List[Dict[str, Any]]:
    return _find_by(db, "fulfiller", email)


def update_order(
    db: Database,
    order_id: str,
    fields: Dict[str, Any],
    expected: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Mise à jour $set de champs sur une commande.
    - expected: filtres supplémentaires (compare-and-set), ex {"order_status": "pending"}.
    - Retourne la ligne mise à jour, ou None si aucune ligne ne correspond.
    """
    try:
        query = db.table(ORDERS_TABLE).update(fields).eq("id", order_id)
        for column, value in (expected or {}).items():
            query = query.eq(column, value)
        res = query.execute()
    except APIError as e:
        if api_error_code(e) == INVALID_TEXT_REPRESENTATION:
            return None
        logger.exception("orders.repository.update_order failed id=%s fields=%s", order_id, fields)
        raise StoreError("Mise à jour de la commande impossible", code="order_update_failed") from e
    except Exception as e:
        logger.exception("orders.repository.update_order failed id=%s fields=%s", order_id, fields)
        raise StoreError("Mise à jour de la commande impossible", code="order_update_failed") from e
    return first_row(res)


def mark_paid(db: Database, order_id: str, owner_email: str) -> Optional[Dict[str, Any]]:
    """
    Passe payment_status à 'paid' sans condition sur l'état courant (rejouable).
    Le filtre sur l'email propriétaire empêche de régler la commande d'un autre client.
    """
    return update_order(db, order_id, {"payment_status": PAYMENT_PAID}, expected={"email": owner_email})


def delete_order(db: Database, order_id: str) -> bool:
    try:
        res = db.table(ORDERS_TABLE).delete().eq("id", order_id).execute()
    except APIError as e:
        if api_error_code(e) == INVALID_TEXT_REPRESENTATION:
            return False
        logger.exception("orders.repository.delete_order failed id=%s", order_id)
        raise StoreError("Suppression de la commande impossible", code="order_delete_failed") from e
    except Exception as e:
        logger.exception("orders.repository.delete_order failed id=%s", order_id)
        raise StoreError("Suppression de la commande impossible", code="order_delete_failed") from e
    return bool(res.data)
