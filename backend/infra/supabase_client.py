"""
Connexion Supabase du backend.
Un seul handle `Database`, ouvert au démarrage par le lifespan et fermé à l'arrêt,
est transmis explicitement aux repositories (pas de client global implicite).
"""
import logging
from typing import Optional
from fastapi import Request
from supabase import create_client, Client
from backend.config import SUPABASE_URL, SUPABASE_SERVICE_KEY
from backend.utils.errors import StoreError

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, url: str = SUPABASE_URL, key: str = SUPABASE_SERVICE_KEY):
        self.url = url
        self.key = key
        self._client: Optional[Client] = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def open(self) -> "Database":
        """
        Crée le client service-role (bypass RLS).
        - Lève RuntimeError si l'URL ou la clé service manquent (échec au démarrage, pas à la 1re requête).
        """
        if not self.url or not self.key:
            raise RuntimeError("SUPABASE_URL / SUPABASE_SERVICE_KEY manquants pour Database.open()")
        if self._client is None:
            self._client = create_client(self.url, self.key)
            logger.info("Supabase client opened url=%s", self.url)
        return self

    def close(self) -> None:
        if self._client is None:
            return
        self._client = None
        logger.info("Supabase client closed")

    @property
    def client(self) -> Client:
        if self._client is None:
            raise StoreError("Base de données non initialisée", code="db_closed")
        return self._client

    def table(self, name: str):
        return self.client.table(name)

    @property
    def auth(self):
        return self.client.auth


def get_db(request: Request) -> Database:
    """Dépendance FastAPI: le handle ouvert par le lifespan (app.state.db)."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise StoreError("Base de données non initialisée", code="db_closed")
    return db


def first_row(res) -> Optional[dict]:
    """Première ligne d'une réponse PostgREST (data liste ou dict), sinon None."""
    data = getattr(res, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data or None
    return None


def api_error_code(exc: Exception) -> Optional[str]:
    """Code SQLSTATE/PostgREST d'une APIError (ex: '23505' pour une violation d'unicité)."""
    code = getattr(exc, "code", None)
    if code:
        return str(code)
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0].get("code")
    return None
