"""
Routes API pour la cloche de notifications
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from auth import AnyPrincipal, get_current_principal
from schemas import ContadorOut
from services.notification_service import BadgeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notificacoes", tags=["notificacoes"])


@router.get("/contador", response_model=ContadorOut)
def get_contador(
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Nombre d'éléments non lus pour le principal courant"""
    try:
        total = BadgeService.get_unread_count(db, principal)
    except SQLAlchemyError:
        logger.exception("Falha ao contar notificações de %s:%s", principal.role, principal.id)
        return JSONResponse(status_code=500, content={"ok": False, "error": "internal_error"})
    return ContadorOut(total_nao_lidas=total)
