from urllib.parse import urlparse
from typing import Any, Dict

from backend.config import BOOKS_TABLE, ORDERS_TABLE, INVOICES_TABLE
from backend.infra.supabase_client import Database


def _check_table(db: Database, name: str) -> Dict[str, Any]:
    try:
        res = db.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}


def health_supabase_info(db: Database) -> Dict[str, Any]:
    """Diagnostic: handle ouvert et tables du pipeline lisibles (sans exposer les clés)."""
    parsed = urlparse(db.url) if db.url else None
    info: Dict[str, Any] = {
        "hostname": parsed.hostname if parsed else None,
        "connect_ok": db.is_open,
        "tables": {},
    }
    if db.is_open:
        for t in (BOOKS_TABLE, ORDERS_TABLE, INVOICES_TABLE):
            info["tables"][t] = _check_table(db, t)
    info["ok"] = info["connect_ok"] and all(t["ok"] for t in info["tables"].values())
    return info
