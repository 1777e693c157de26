"""Couche service des commandes.
Rôles:
- Créer une commande « pending / unpaid » à partir d'un livre publié du catalogue.
- Annuler une commande (propriétaire, bibliothécaire ou admin): pending -> cancelled, terminal.
- Faire avancer la livraison (bibliothécaire): pending -> shipped -> delivered.
Les transitions sont des compare-and-set sur le statut courant: deux requêtes
concurrentes ne peuvent pas sortir une commande de l'état 'cancelled'.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List
import logging

from backend.books import repository as books_repository
from backend.infra.supabase_client import Database
from backend.orders import repository
from backend.orders.models import (
    ORDER_PENDING,
    ORDER_CANCELLED,
    PAYMENT_UNPAID,
    FULFILLMENT_STATES,
    FULFILLMENT_TRANSITIONS,
    order_summary,
)
from backend.utils.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _same_email(a: Any, b: Any) -> bool:
    return bool(a) and bool(b) and str(a).strip().lower() == str(b).strip().lower()


def _load(db: Database, order_id: str) -> Dict[str, Any]:
    order = repository.get_order(db, order_id)
    if not order:
        raise NotFoundError("Commande introuvable", code="order_not_found")
    return order


def create_order(db: Database, *, owner_email: str, book_id: str, quantity: int) -> Dict[str, Any]:
    """Crée la commande; prix, titre et bibliothécaire viennent du livre (jamais du client)."""
    if quantity <= 0:
        raise ValidationError("Quantité invalide", code="invalid_quantity")
    book = books_repository.get_book(db, book_id)
    if not book:
        raise NotFoundError("Livre introuvable", code="book_not_found")
    if book.get("status") != books_repository.PUBLISHED:
        raise ConflictError("Livre non disponible à l'achat", code="book_not_purchasable")
    price = Decimal(str(book.get("price") or 0))
    if price <= 0:
        raise ConflictError("Livre non disponible à l'achat", code="book_not_purchasable")

    data = {
        "email": owner_email,
        "fulfiller": book.get("librarian_email"),
        "book_id": str(book.get("id") or book_id),
        "book_name": book.get("title") or "",
        "quantity": quantity,
        "price": f"{price:.2f}",
        "order_status": ORDER_PENDING,
        "payment_status": PAYMENT_UNPAID,
        "ordered_at": datetime.now(timezone.utc).isoformat(),
    }
    order = repository.insert_order(db, data)
    logger.info("orders.create id=%s book_id=%s quantity=%s", order.get("id"), data["book_id"], quantity)
    return order


def cancel_order(db: Database, order_id: str, actor: Dict[str, Any]) -> Dict[str, Any]:
    """
    Annule une commande 'pending'.
    - Déjà annulée: no-op, succès (changed=False).
    - Autre statut (shipped/delivered): ConflictError.
    - Le paiement n'est pas touché (pas de remboursement ici).
    """
    order = _load(db, order_id)
    is_party = _same_email(actor.get("email"), order.get("email")) or _same_email(actor.get("email"), order.get("fulfiller"))
    if not is_party and actor.get("role") != "admin":
        raise ForbiddenError("Commande appartenant à un autre utilisateur", code="not_order_party")

    status = order.get("order_status")
    if status == ORDER_CANCELLED:
        return order_summary(order, changed=False)
    if status != ORDER_PENDING:
        raise ConflictError(f"Commande non annulable (order_status={status})", code="order_not_cancellable")

    updated = repository.update_order(
        db, order_id, {"order_status": ORDER_CANCELLED}, expected={"order_status": ORDER_PENDING}
    )
    if updated is None:
        # Le statut a changé entre la lecture et l'écriture
        current = _load(db, order_id)
        if current.get("order_status") == ORDER_CANCELLED:
            return order_summary(current, changed=False)
        raise ConflictError(
            f"Commande non annulable (order_status={current.get('order_status')})", code="order_not_cancellable"
        )
    logger.info("orders.cancel id=%s by=%s", order_id, actor.get("email"))
    return order_summary(updated, changed=True)


def update_fulfillment_status(db: Database, order_id: str, actor: Dict[str, Any], status: str) -> Dict[str, Any]:
    if status not in FULFILLMENT_STATES:
        raise ValidationError(f"Statut de livraison inconnu: {status}", code="invalid_status")
    order = _load(db, order_id)
    if not _same_email(actor.get("email"), order.get("fulfiller")) and actor.get("role") != "admin":
        raise ForbiddenError("Seul le bibliothécaire de la commande peut la modifier", code="not_fulfiller")

    current = order.get("order_status")
    if current == status:
        return order_summary(order, changed=False)
    if status not in FULFILLMENT_TRANSITIONS.get(current, set()):
        logger.warning("orders.status refused id=%s %s -> %s", order_id, current, status)
        raise ConflictError(f"Transition interdite: {current} -> {status}", code="invalid_transition")

    updated = repository.update_order(db, order_id, {"order_status": status}, expected={"order_status": current})
    if updated is None:
        raise ConflictError("Commande modifiée entre-temps, réessayez", code="concurrent_update")
    logger.info("orders.status id=%s %s -> %s", order_id, current, status)
    return order_summary(updated, changed=True)


def list_owner_orders(db: Database, email: str) -> List[Dict[str, Any]]:
    return repository.find_by_owner(db, email)


def list_fulfiller_orders(db: Database, email: str) -> List[Dict[str, Any]]:
    return repository.find_by_fulfiller(db, email)


def delete_order(db: Database, order_id: str) -> Dict[str, Any]:
    if not repository.delete_order(db, order_id):
        raise NotFoundError("Commande introuvable", code="order_not_found")
    logger.info("orders.delete id=%s", order_id)
    return {"deleted": True, "id": order_id}
