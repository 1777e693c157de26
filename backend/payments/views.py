# module backend.payments.views
"""Endpoints du paiement Stripe Checkout.
- /create-checkout-session: ouvre une session pour une commande pending (rate-limité).
- /payment-success: confirmation sans webhook; le sessionId est la seule entrée,
  toutes les données de règlement viennent de la session Stripe.
"""
import logging
from fastapi import APIRouter, Depends

from backend.infra.supabase_client import Database, get_db
from backend.payments import service as payments_service
from backend.payments.models import CheckoutSessionIn, PaymentSuccessIn
from backend.utils.rate_limit import optional_rate_limit

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])


@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(payload: CheckoutSessionIn, db: Database = Depends(get_db)):
    """
    Entrée JSON: {orderId, itemId, itemName, price, quantity, customerEmail}
    Retour: {"url": <redirection Stripe>, "id": <session id>}
    Erreurs: 400 validation, 404 commande/livre, 409 commande non payable, 502 Stripe.
    """
    session = payments_service.open_checkout_session(
        db,
        order_id=payload.order_id,
        item_id=payload.item_id,
        item_name=payload.item_name,
        price=payload.price,
        quantity=payload.quantity,
        customer_email=payload.customer_email,
    )
    return {"url": session.get("url"), "id": session.get("id")}


@router.post("/payment-success")
def payment_success(payload: PaymentSuccessIn, db: Database = Depends(get_db)):
    """
    Rejouable: un second appel pour une session déjà réglée renvoie success=true
    sans créer de nouvelle facture. 502 si Stripe est indisponible (à réessayer).
    """
    return payments_service.confirm_payment(db, payload.session_id)
