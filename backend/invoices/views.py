from typing import Any, Dict
from fastapi import APIRouter, Depends

from backend.infra.supabase_client import Database, get_db
from backend.invoices import repository as invoices_repository
from backend.utils.security import require_user

router = APIRouter(tags=["Invoices API"])


@router.get("/my-invoices")
def my_invoices(db: Database = Depends(get_db), user: Dict[str, Any] = Depends(require_user)):
    """Factures de l'utilisateur connecté (les plus récentes d'abord)."""
    return invoices_repository.list_by_owner(db, user.get("email"))
