"""
Gestionnaires d'erreurs centralisés pour l'application Drive Rent Hub
Standardisation de la gestion et du format des erreurs
"""
from typing import Dict, Any, List, Optional
from fastapi import status
from fastapi.responses import JSONResponse

from constants import ERROR_MESSAGES


class ErrorResponse:
    """Structure standardisée pour les réponses d'erreur"""

    def __init__(
        self,
        message: str,
        detalhes: Optional[str] = None,
        status_code: int = 400,
        extra: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.detalhes = detalhes
        self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convertit en dictionnaire pour la réponse JSON"""
        response = {"error": self.message}

        if self.detalhes:
            response["detalhes"] = self.detalhes

        response.update(self.extra)
        return response

    def to_json_response(self) -> JSONResponse:
        """Retourne une JSONResponse FastAPI"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class AppError(Exception):
    """
    Erreur métier typée: chaque sous-classe porte son code HTTP.
    Levée par les services, convertie en réponse JSON par le gestionnaire global.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = ERROR_MESSAGES["internal_error"]

    def __init__(self, message: Optional[str] = None, detalhes: Optional[str] = None):
        self.message = message or self.default_message
        self.detalhes = detalhes
        super().__init__(self.message)

    def extra(self) -> Dict[str, Any]:
        return {}

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            message=self.message,
            detalhes=self.detalhes,
            status_code=self.status_code,
            extra=self.extra()
        )


class ValidationError(AppError):
    """Champ requis manquant, format invalide, ordre des dates, enum inconnu"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = ERROR_MESSAGES["invalid_data"]


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = ERROR_MESSAGES["not_authenticated"]


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = ERROR_MESSAGES["forbidden"]


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso não encontrado"


class ConflictError(AppError):
    """Ressource dans un état incompatible avec l'opération, ou chevauchement de dates"""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflito"


class UnprocessableError(AppError):
    """État calculé invalide: dates illisibles, valor_por_dia non positif, dados legais incomplets"""
    status_code = 422
    default_message = "Entidade não processável"

    def __init__(
        self,
        message: Optional[str] = None,
        detalhes: Optional[str] = None,
        campos_faltantes: Optional[Dict[str, List[str]]] = None
    ):
        super().__init__(message, detalhes)
        self.campos_faltantes = campos_faltantes

    def extra(self) -> Dict[str, Any]:
        if self.campos_faltantes:
            return {"campos_faltantes": self.campos_faltantes}
        return {}


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = ERROR_MESSAGES["internal_error"]
