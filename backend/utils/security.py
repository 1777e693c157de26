from fastapi import Request, Depends
from typing import Optional, Dict, Any
import logging

from backend.infra.supabase_client import Database, get_db
from backend.utils.errors import UnauthorizedError, ForbiddenError

logger = logging.getLogger(__name__)

ROLES = ("admin", "librarian", "user")


def determine_role(metadata: Dict[str, Any] | None) -> str:
    """Rôle applicatif lu dans user_metadata.role ('user' par défaut)."""
    role_lower = str((metadata or {}).get("role", "")).lower()
    return role_lower if role_lower in ROLES else "user"


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def verify_token(db: Database, access_token: str) -> Dict[str, Any]:
    """
    Vérifie le jeton auprès de Supabase Auth (supabase.auth.get_user) et normalise le principal:
    {id, email, metadata, role, token}. Lève UnauthorizedError si le jeton est refusé.
    """
    try:
        res = db.auth.get_user(access_token)
    except Exception:
        logger.exception("security.verify_token rejected")
        raise UnauthorizedError("Accès non autorisé", code="invalid_token")
    user = getattr(res, "user", None)
    email = getattr(user, "email", None)
    if not user or not email:
        raise UnauthorizedError("Accès non autorisé", code="invalid_token")
    metadata = getattr(user, "user_metadata", None) or {}
    return {
        "id": getattr(user, "id", None),
        "email": email,
        "metadata": metadata,
        "role": determine_role(metadata),
        "token": access_token,
    }


def get_current_user(request: Request, db: Database = Depends(get_db)) -> Dict[str, Any]:
    token = bearer_token(request)
    if not token:
        raise UnauthorizedError("Accès non autorisé", code="missing_token")
    return verify_token(db, token)


def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user


def require_admin(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    if user.get("role") != "admin":
        raise ForbiddenError("Accès interdit", code="admin_required")
    return user


def require_staff(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Admin ou bibliothécaire (gestion du catalogue)."""
    if user.get("role") not in ("admin", "librarian"):
        raise ForbiddenError("Accès interdit", code="staff_required")
    return user
