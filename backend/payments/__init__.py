"""
Module 'payments' (feature-first): point d'entrée public.
Réunit metadata Stripe, client Stripe et services de règlement.
"""

from .metadata import make_metadata, extract_metadata_from_snapshot
from .models import SessionSnapshot
from .stripe_client import require_stripe, to_minor_units, create_session, retrieve_session
from .service import open_checkout_session, confirm_payment

__all__ = [
    # metadata
    "make_metadata",
    "extract_metadata_from_snapshot",
    # stripe
    "SessionSnapshot",
    "require_stripe",
    "to_minor_units",
    "create_session",
    "retrieve_session",
    # services
    "open_checkout_session",
    "confirm_payment",
]
