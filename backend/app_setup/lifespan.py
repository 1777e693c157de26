"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Ouvre le handle Supabase (app.state.db) et le ferme à l'arrêt.
- Configure la clé Stripe.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
Variables d'environnement supportées:
  - DISABLE_DB_INIT_FOR_TESTS=1: n'ouvre pas la base (les tests injectent la leur)
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement le rate limiting
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from backend.infra.supabase_client import Database
from backend.payments.stripe_client import require_stripe

logger = logging.getLogger("uvicorn.error")


async def _init_rate_limiter(app: FastAPI) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        app.state.rate_limit_enabled = False
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: base, Stripe, rate limiting. Shutdown: fermeture dans l'ordre inverse.
    - Une base non configurée fait échouer le démarrage (sauf DISABLE_DB_INIT_FOR_TESTS=1).
    """
    db = None
    if os.getenv("DISABLE_DB_INIT_FOR_TESTS") != "1":
        db = Database().open()
        app.state.db = db
    require_stripe()
    await _init_rate_limiter(app)
    try:
        yield
    finally:
        if getattr(app.state, "rate_limit_enabled", False):
            await FastAPILimiter.close()
        if db is not None:
            db.close()
            app.state.db = None
