# module backend.orders.views

"""Endpoints des commandes.
- POST /customer-order: crée une commande pending/unpaid pour l'utilisateur connecté.
- GET /my-orders, GET /fulfiller-orders: listes côté client et côté bibliothécaire.
- PATCH /cancel-order/{id}: annulation (propriétaire, bibliothécaire ou admin).
- PATCH /orders/{id}/status: avancement de la livraison (bibliothécaire).
- DELETE /orders/{id}: suppression administrative.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends

from backend.infra.supabase_client import Database, get_db
from backend.orders import service as orders_service
from backend.orders.models import CreateOrderIn, OrderStatusIn
from backend.utils.security import require_user, require_admin

router = APIRouter(tags=["Orders API"])


@router.post("/customer-order")
def create_customer_order(payload: CreateOrderIn, db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_user)):
    return orders_service.create_order(
        db, owner_email=user.get("email"), book_id=payload.book_id, quantity=payload.quantity
    )


@router.get("/my-orders")
def my_orders(db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_user)):
    return orders_service.list_owner_orders(db, user.get("email"))


@router.get("/fulfiller-orders")
def fulfiller_orders(db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_user)):
    return orders_service.list_fulfiller_orders(db, user.get("email"))


@router.patch("/cancel-order/{order_id}")
def cancel_order(order_id: str, db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_user)):
    """Annule la commande; un deuxième appel renvoie le même état avec changed=False."""
    return orders_service.cancel_order(db, order_id, user)


@router.patch("/orders/{order_id}/status")
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    db: Database = Depends(get_db),
    user: Dict[str, Any] = Depends(require_user),
):
    return orders_service.update_fulfillment_status(db, order_id, user, payload.status)


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_admin)):
    return orders_service.delete_order(db, order_id)
