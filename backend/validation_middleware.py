"""
Gestionnaires d'exceptions globaux: erreurs métier, validation des requêtes, base de données
"""
import logging
import os

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from constants import ERROR_MESSAGES
from error_handlers import AppError, ErrorResponse, InternalError

logger = logging.getLogger(__name__)


class ValidationErrorHandler:
    """Mise en forme des erreurs de validation Pydantic"""

    @staticmethod
    def format_validation_error(errors) -> str:
        """
        Formate les erreurs de validation en une ligne lisible: "campo: mensagem; ..."
        """
        parts = []
        for error in errors:
            # On ignore le préfixe "body"/"query" ajouté par FastAPI
            loc = [str(x) for x in error.get('loc', ()) if x not in ('body', 'query', 'path')]
            field_path = '.'.join(loc) or 'payload'
            parts.append(f"{field_path}: {error.get('msg')}")
        return '; '.join(parts)


def _is_production() -> bool:
    return os.getenv("ENVIRONMENT", "development") == "production"


async def app_error_handler(request: Request, exc: AppError):
    """Erreurs métier typées -> {error, detalhes?}"""
    if exc.status_code >= 500:
        logger.error("Erro %s em %s %s: %s", exc.status_code, request.method, request.url.path, exc.message)
    return exc.to_response().to_json_response()


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Corps ou paramètres invalides -> 400"""
    return ErrorResponse(
        message=ERROR_MESSAGES["invalid_data"],
        detalhes=ValidationErrorHandler.format_validation_error(exc.errors()),
        status_code=400
    ).to_json_response()


async def http_exception_handler(request: Request, exc: HTTPException):
    """HTTPException de FastAPI (routes inconnues, méthodes, ...) au même format"""
    message = exc.detail if isinstance(exc.detail, str) else ERROR_MESSAGES["invalid_data"]
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Erreurs de base de données et exceptions inattendues -> 500"""
    if isinstance(exc, SQLAlchemyError):
        logger.exception("Erro de banco em %s %s", request.method, request.url.path)
    else:
        logger.exception("Erro inesperado em %s %s", request.method, request.url.path)

    detalhes = None if _is_production() else str(exc)
    return InternalError(detalhes=detalhes).to_response().to_json_response()
