"""
Gestionnaires d'exceptions utilisés par la factory.
- BookstoreError (et sous-classes): JSON {detail, kind, code} avec le statut de la classe.
- RequestValidationError: 422 avec kind='validation' pour rester lisible côté client.
- HTTPException: réponse JSON FastAPI standard.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from backend.utils.errors import BookstoreError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookstoreError)
    async def bookstore_error(request: Request, exc: BookstoreError):
        if exc.status_code >= 500:
            logger.warning("%s %s -> %s (%s)", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "kind": exc.kind, "code": exc.code},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": jsonable_encoder(exc.errors()), "kind": "validation", "code": "invalid_body"},
        )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
