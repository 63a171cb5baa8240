"""
Routes API pour les dados legais du motorista et du proprietário connectés
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from auth import AnyPrincipal, get_current_principal
from audit_logger import AuditLogger
from constants import ERROR_MESSAGES
from enums import ActionType, EntityType, PartySide
from error_handlers import ForbiddenError, ValidationError
from schemas import DadosLegaisIn, DadosLegaisOut
from services.legal_profile_service import LegalProfileService

router = APIRouter(tags=["dados-legais"])


def _check_side(principal: AnyPrincipal, side: PartySide) -> None:
    if side == PartySide.MOTORISTA and not principal.is_driver:
        raise ForbiddenError(ERROR_MESSAGES["only_drivers"])
    if side == PartySide.PROPRIETARIO and not principal.is_owner:
        raise ForbiddenError(ERROR_MESSAGES["only_owners"])


def _read(db: Session, principal: AnyPrincipal, side: PartySide) -> DadosLegaisOut:
    _check_side(principal, side)
    profile = LegalProfileService.get(db, side, principal.id)
    return DadosLegaisOut(**LegalProfileService.describe(profile))


def _upsert(
    db: Session,
    principal: AnyPrincipal,
    side: PartySide,
    payload: DadosLegaisIn,
    request: Request
) -> DadosLegaisOut:
    _check_side(principal, side)
    fields = payload.non_empty_fields()
    if not fields:
        raise ValidationError(ERROR_MESSAGES["nothing_to_update"])

    try:
        profile = LegalProfileService.upsert(db, side, principal.id, payload)
        AuditLogger.log_action(
            db=db,
            action=ActionType.UPSERT,
            entity_type=EntityType.DADOS_LEGAIS,
            entity_id=principal.id,
            principal=principal,
            description=f"Dados legais de {side.value} #{principal.id} atualizados",
            details={"campos": sorted(fields)},
            request=request
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(profile)
    return DadosLegaisOut(**LegalProfileService.describe(profile))


@router.get("/motoristas/me/dados-legais", response_model=DadosLegaisOut)
def get_dados_motorista(
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return _read(db, principal, PartySide.MOTORISTA)


@router.put("/motoristas/me/dados-legais", response_model=DadosLegaisOut)
def put_dados_motorista(
    payload: DadosLegaisIn,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return _upsert(db, principal, PartySide.MOTORISTA, payload, request)


@router.get("/proprietarios/me/dados-legais", response_model=DadosLegaisOut)
def get_dados_proprietario(
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return _read(db, principal, PartySide.PROPRIETARIO)


@router.put("/proprietarios/me/dados-legais", response_model=DadosLegaisOut)
def put_dados_proprietario(
    payload: DadosLegaisIn,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return _upsert(db, principal, PartySide.PROPRIETARIO, payload, request)
