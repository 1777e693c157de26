# module backend.orders.models
"""Statuts et corps de requête des commandes.
- order_status: pending -> cancelled | shipped | delivered ; cancelled et delivered sont terminaux.
- payment_status: unpaid -> paid, uniquement via une session Stripe confirmée.
"""
from typing import Dict, Any
from pydantic import BaseModel, Field, field_validator

ORDER_PENDING = "pending"
ORDER_CANCELLED = "cancelled"
ORDER_SHIPPED = "shipped"
ORDER_DELIVERED = "delivered"

PAYMENT_UNPAID = "unpaid"
PAYMENT_PAID = "paid"

FULFILLMENT_STATES = (ORDER_SHIPPED, ORDER_DELIVERED)

# Transitions autorisées pour le bibliothécaire (hors annulation)
FULFILLMENT_TRANSITIONS = {
    ORDER_PENDING: {ORDER_SHIPPED, ORDER_DELIVERED},
    ORDER_SHIPPED: {ORDER_DELIVERED},
}


class CreateOrderIn(BaseModel):
    book_id: str = Field(..., alias="bookId", min_length=1)
    quantity: int = 1

    model_config = {"populate_by_name": True}


class OrderStatusIn(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return (v or "").strip().lower()


def order_summary(order: Dict[str, Any], changed: bool) -> Dict[str, Any]:
    return {
        "id": order.get("id"),
        "order_status": order.get("order_status"),
        "payment_status": order.get("payment_status"),
        "changed": changed,
    }
