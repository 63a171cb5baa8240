from sqlalchemy.orm import Session
from fastapi import Request
import models
import json
import logging
from typing import Optional, Dict, Any

from enums import ActionType, EntityType

logger = logging.getLogger(__name__)


class AuditLogger:
    """Service de logging pour auditer les actions du workflow de location"""

    @staticmethod
    def log_action(
        db: Session,
        action: ActionType,
        entity_type: EntityType,
        description: str,
        principal=None,
        entity_id: Optional[int] = None,
        details: Optional[Dict[Any, Any]] = None,
        request: Optional[Request] = None
    ) -> models.AuditLog:
        """
        Ajoute une entrée d'audit à la session courante, sans commit:
        l'entrée est validée ou annulée avec la transaction de l'appelant.

        Args:
            db: Session de base de données
            action: Type d'action (CREATE, APPROVE, SIGN, ...)
            entity_type: Type d'entité concernée
            description: Description de l'action
            principal: Principal authentifié à l'origine de l'action
            entity_id: ID de l'entité concernée
            details: Détails supplémentaires (avant/après, montants, ...)
            request: Objet Request FastAPI pour récupérer IP, endpoint, méthode
        """
        ip_address = None
        endpoint = None
        method = None

        if request:
            ip_address = request.client.host if request.client else None
            endpoint = str(request.url.path)
            method = request.method

        details_json = None
        if details:
            try:
                details_json = json.dumps(details, default=str, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                details_json = f"Erreur de sérialisation: {str(e)}"

        audit_log = models.AuditLog(
            user_id=principal.id if principal else None,
            user_role=principal.role if principal else None,
            action=action.value,
            entity_type=entity_type.value,
            entity_id=entity_id,
            description=description,
            details=details_json,
            ip_address=ip_address,
            endpoint=endpoint,
            method=method
        )
        db.add(audit_log)

        logger.info(
            "[%s] %s #%s por %s:%s - %s",
            action.value, entity_type.value, entity_id,
            principal.role if principal else "-", principal.id if principal else "-",
            description
        )
        return audit_log
