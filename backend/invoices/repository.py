"""
Accès aux factures (table INVOICES_TABLE).
L'unicité de payment_intent_id est garantie par la contrainte UNIQUE de la table:
l'insertion est atomique, une violation (23505) signifie « déjà facturé ».
"""
from typing import Any, Dict, List, Optional
import logging
from postgrest.exceptions import APIError

from backend.config import INVOICES_TABLE
from backend.infra.supabase_client import Database, first_row, api_error_code
from backend.utils.errors import StoreError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


# module backend.invoices.repository
def find_by_payment_intent(db: Database, payment_intent_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            db.table(INVOICES_TABLE)
            .select("*")
            .eq("payment_intent_id", payment_intent_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("invoices.repository.find_by_payment_intent failed pi=%s", payment_intent_id)
        raise StoreError("Lecture de la facture impossible", code="invoice_read_failed") from e
    return first_row(res)


def insert_invoice_if_absent(db: Database, invoice: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Insère la facture si aucune n'existe pour ce payment_intent_id.
    - Retourne la facture créée, ou None si elle existait déjà (doublon 23505).
    - Toute autre erreur remonte en StoreError.
    """
    try:
        res = db.table(INVOICES_TABLE).insert(invoice).execute()
    except APIError as e:
        if api_error_code(e) == UNIQUE_VIOLATION:
            logger.info("invoices.repository duplicate pi=%s", invoice.get("payment_intent_id"))
            return None
        logger.exception("invoices.repository.insert_invoice_if_absent failed pi=%s", invoice.get("payment_intent_id"))
        raise StoreError("Enregistrement de la facture impossible", code="invoice_insert_failed") from e
    except Exception as e:
        logger.exception("invoices.repository.insert_invoice_if_absent failed pi=%s", invoice.get("payment_intent_id"))
        raise StoreError("Enregistrement de la facture impossible", code="invoice_insert_failed") from e
    return first_row(res) or invoice


def list_by_owner(db: Database, email: str) -> List[Dict[str, Any]]:
    try:
        res = (
            db.table(INVOICES_TABLE)
            .select("*")
            .eq("customer", email)
            .order("issued_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.exception("invoices.repository.list_by_owner failed")
        raise StoreError("Lecture des factures impossible", code="invoices_read_failed") from e
    return res.data or []
