"""
Sérialisation/désérialisation des métadonnées Stripe (orderId, bookId, customer, quantity).
Posées par le serveur à la création de la session, relues à la confirmation:
ce sont les seules données de règlement considérées comme fiables.
"""
from typing import Any, Dict, Optional

from backend.payments.models import SessionSnapshot


# module backend.payments.metadata
def make_metadata(*, order_id: str, book_id: str, customer: str, quantity: int) -> Dict[str, str]:
    """Stripe n'accepte que des valeurs chaîne dans metadata."""
    return {
        "orderId": str(order_id),
        "bookId": str(book_id),
        "customer": str(customer),
        "quantity": str(quantity),
    }


def _quantity(raw: Any) -> int:
    try:
        qty = int(raw)
    except (TypeError, ValueError):
        return 1
    return qty if qty > 0 else 1


def extract_metadata_from_snapshot(snapshot: SessionSnapshot) -> Dict[str, Optional[Any]]:
    """
    Extrait {order_id, book_id, customer, quantity} depuis la session.
    - Valeurs absentes -> None (le service décide de l'erreur).
    - quantity illisible -> 1.
    """
    meta = snapshot.metadata or {}
    return {
        "order_id": meta.get("orderId") or None,
        "book_id": meta.get("bookId") or None,
        "customer": meta.get("customer") or None,
        "quantity": _quantity(meta.get("quantity")),
    }
