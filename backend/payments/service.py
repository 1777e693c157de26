"""
Cas d'usage 'payments': orchestre commandes, factures, Stripe et metadata.

- open_checkout_session: vérifie la commande pending/unpaid puis ouvre une session Checkout.
  Aucune écriture: si le client abandonne, la commande reste simplement 'pending'.
- confirm_payment: rejouable à volonté pour une même session.
  1) lit la session chez Stripe (échec -> GatewayError, aucune écriture)
  2) non payée -> {"success": False}, aucune écriture
  3) payée -> payment_status='paid' (set inconditionnel) puis facture insérée
     si absente (contrainte UNIQUE sur payment_intent_id)
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
import logging

from backend.books import repository as books_repository
from backend.config import CLIENT_DOMAIN
from backend.infra.supabase_client import Database
from backend.invoices import repository as invoices_repository
from backend.orders import repository as orders_repository
from backend.orders.models import ORDER_PENDING, PAYMENT_PAID
from backend.payments import metadata as meta
from backend.payments import stripe_client
from backend.payments.models import SessionSnapshot
from backend.utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def checkout_urls(book_id: str) -> Dict[str, str]:
    return {
        # {CHECKOUT_SESSION_ID} est substitué par Stripe
        "success_url": f"{CLIENT_DOMAIN}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{CLIENT_DOMAIN}/books/{book_id}",
    }


def open_checkout_session(
    db: Database,
    *,
    order_id: str,
    item_id: str,
    item_name: str,
    price: Any,
    quantity: int,
    customer_email: str,
) -> Dict[str, Any]:
    """
    Ouvre une session Stripe pour une commande existante.
    Vérifications défensives: commande existante, même client et même livre,
    encore pending/unpaid, montant identique à celui enregistré, livre toujours au catalogue.
    """
    if quantity <= 0:
        raise ValidationError("Quantité invalide", code="invalid_quantity")
    unit_amount = stripe_client.to_minor_units(price)
    if unit_amount <= 0:
        raise ValidationError("Prix invalide", code="invalid_price")

    order = orders_repository.get_order(db, order_id)
    if not order:
        raise NotFoundError("Commande introuvable", code="order_not_found")
    owner = order.get("email") or ""
    if owner.strip().lower() != str(customer_email).strip().lower():
        raise ValidationError("Commande appartenant à un autre client", code="order_owner_mismatch")
    if str(order.get("book_id")) != str(item_id):
        raise ValidationError("Article différent de celui de la commande", code="order_item_mismatch")
    if order.get("payment_status") == PAYMENT_PAID:
        raise ConflictError("Commande déjà payée", code="order_already_paid")
    if order.get("order_status") != ORDER_PENDING:
        raise ConflictError(f"Commande non payable (order_status={order.get('order_status')})", code="order_not_pending")
    if int(order.get("quantity") or 0) != quantity or stripe_client.to_minor_units(order.get("price") or 0) != unit_amount:
        raise ValidationError("Montant différent de celui de la commande", code="order_amount_mismatch")

    if not books_repository.get_book(db, item_id):
        raise NotFoundError("Livre introuvable", code="book_not_found")

    metadata = meta.make_metadata(order_id=order_id, book_id=item_id, customer=owner, quantity=quantity)
    session = stripe_client.create_session(
        item_name=item_name,
        unit_amount=unit_amount,
        quantity=quantity,
        owner_email=owner,
        metadata=metadata,
        **checkout_urls(item_id),
    )
    logger.info("payments.checkout session_id=%s order_id=%s amount=%s x%s", session.get("id"), order_id, unit_amount, quantity)
    return session


def build_invoice(snapshot: SessionSnapshot, facts: Dict[str, Any]) -> Dict[str, Any]:
    amount = (Decimal(snapshot.amount_total or 0) / 100).quantize(Decimal("0.01"))
    return {
        "payment_intent_id": snapshot.payment_intent_id,
        "order_id": facts["order_id"],
        "book_id": facts["book_id"],
        "customer": facts["customer"],
        "quantity": facts["quantity"],
        "amount": f"{amount:.2f}",
        "issued_at": datetime.now(timezone.utc).isoformat(),
    }


def confirm_payment(db: Database, session_id: str) -> Dict[str, Any]:
    """
    Confirme le paiement d'une session Checkout (idempotent).
    Retour: {"success": True, "orderId", "paymentId", "invoiceId", "invoiceCreated"} ou
            {"success": False, "message", "paymentStatus"} si le paiement n'est pas finalisé.
    """
    snapshot = stripe_client.retrieve_session(session_id)

    if not snapshot.is_paid:
        logger.info("payments.confirm not paid session_id=%s status=%s", session_id, snapshot.payment_status)
        return {
            "success": False,
            "message": "Paiement non finalisé",
            "paymentStatus": snapshot.payment_status,
        }

    facts = meta.extract_metadata_from_snapshot(snapshot)
    if not facts["order_id"] or not facts["customer"]:
        raise NotFoundError("Métadonnées de session incomplètes", code="session_metadata_missing")
    if not snapshot.payment_intent_id:
        raise NotFoundError("Session payée sans payment_intent", code="payment_intent_missing")

    order = orders_repository.mark_paid(db, facts["order_id"], facts["customer"])
    if not order:
        raise NotFoundError("Commande introuvable pour cette session", code="order_not_found")

    created = invoices_repository.insert_invoice_if_absent(db, build_invoice(snapshot, facts))
    if created is None:
        logger.warning("payments.confirm replay session_id=%s pi=%s", session_id, snapshot.payment_intent_id)
        invoice = invoices_repository.find_by_payment_intent(db, snapshot.payment_intent_id) or {}
    else:
        logger.info("payments.confirm settled session_id=%s order_id=%s pi=%s", session_id, facts["order_id"], snapshot.payment_intent_id)
        invoice = created

    return {
        "success": True,
        "orderId": facts["order_id"],
        "paymentId": snapshot.payment_intent_id,
        "invoiceId": invoice.get("id"),
        "invoiceCreated": created is not None,
    }
