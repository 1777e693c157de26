"""
Adaptateur Stripe: centralise les appels Checkout et la configuration Stripe.
Toute erreur du SDK (requête refusée, id inconnu, réseau) devient GatewayError;
aucun appel n'est rejoué automatiquement.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict

import stripe

from backend.config import STRIPE_SECRET_KEY, CHECKOUT_CURRENCY
from backend.payments.models import SessionSnapshot
from backend.utils.errors import GatewayError, ValidationError

logger = logging.getLogger(__name__)


# module backend.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels échouent côté SDK et remontent en GatewayError.
    """
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    return stripe


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def to_minor_units(price: Any) -> int:
    """Prix décimal (ex: 20.00) -> montant en centimes (2000), arrondi half-up."""
    try:
        amount = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise ValidationError("Prix invalide", code="invalid_price")
    if not amount.is_finite():
        raise ValidationError("Prix invalide", code="invalid_price")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_session(
    *,
    item_name: str,
    unit_amount: int,
    quantity: int,
    owner_email: str,
    metadata: Dict[str, str],
    success_url: str,
    cancel_url: str,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout pour un seul article.
    - unit_amount en centimes, quantity > 0; devise fixe (CHECKOUT_CURRENCY).
    - Retour: {"id": "cs_...", "url": "https://checkout.stripe.com/..."}
    """
    if unit_amount <= 0:
        raise ValidationError("Montant invalide", code="invalid_amount")
    if quantity <= 0:
        raise ValidationError("Quantité invalide", code="invalid_quantity")
    try:
        session = stripe.checkout.Session.create(
            line_items=[
                {
                    "price_data": {
                        "currency": CHECKOUT_CURRENCY,
                        "product_data": {"name": item_name},
                        "unit_amount": unit_amount,
                    },
                    "quantity": quantity,
                }
            ],
            customer_email=owner_email,
            mode="payment",
            metadata=metadata,
            success_url=success_url,
            cancel_url=cancel_url,
        )
    except stripe.StripeError as e:
        logger.exception("stripe_client.create_session failed order_id=%s", metadata.get("orderId"))
        raise GatewayError(f"Session de paiement refusée: {e.user_message or e}", code="checkout_create_failed") from e
    return {"id": _field(session, "id"), "url": _field(session, "url")}


def retrieve_session(session_id: str) -> SessionSnapshot:
    """
    Lit une session Checkout et la normalise en SessionSnapshot.
    payment_intent peut être un id ou un objet développé (expand).
    """
    if not session_id:
        raise ValidationError("sessionId manquant", code="missing_session_id")
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.exception("stripe_client.retrieve_session failed session_id=%s", session_id)
        raise GatewayError("Session de paiement introuvable ou Stripe indisponible", code="checkout_retrieve_failed") from e

    intent = _field(session, "payment_intent")
    if intent is not None and not isinstance(intent, str):
        intent = _field(intent, "id")
    metadata = _field(session, "metadata") or {}
    return SessionSnapshot(
        session_id=_field(session, "id") or session_id,
        payment_status=_field(session, "payment_status") or "",
        metadata={str(k): str(v) for k, v in dict(metadata).items()},
        amount_total=_field(session, "amount_total"),
        payment_intent_id=intent,
    )
