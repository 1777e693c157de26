"""
Types du pipeline de paiement: corps de requête et instantané de session Stripe.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, EmailStr, Field


class CheckoutSessionIn(BaseModel):
    order_id: str = Field(..., alias="orderId", min_length=1)
    item_id: str = Field(..., alias="itemId", min_length=1)
    item_name: str = Field(..., alias="itemName", min_length=1)
    price: Decimal
    quantity: int
    customer_email: EmailStr = Field(..., alias="customerEmail")

    model_config = {"populate_by_name": True}


class PaymentSuccessIn(BaseModel):
    session_id: str = Field(..., alias="sessionId", min_length=1)

    model_config = {"populate_by_name": True}


@dataclass
class SessionSnapshot:
    """État d'une session Checkout tel que lu chez Stripe (source de vérité du règlement)."""
    session_id: str
    payment_status: str
    metadata: Dict[str, str] = field(default_factory=dict)
    amount_total: Optional[int] = None
    payment_intent_id: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"
