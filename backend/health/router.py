from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backend.health.service import health_supabase_info
from backend.infra.supabase_client import Database, get_db
from backend.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root(request: Request):
    return {"ok": True, "rate_limit": rate_limit_health_info(request)}


@router.get("/supabase")
def health_supabase(db: Database = Depends(get_db)):
    info = health_supabase_info(db)
    return JSONResponse(info, status_code=200 if info["ok"] else 503)
