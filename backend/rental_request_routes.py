"""
Routes API pour les solicitações de aluguel
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import AnyPrincipal, get_current_principal
from enums import PartySide, RequestStatus
from schemas import (
    SolicitacaoCreate, SolicitacaoOut, SolicitacaoAprovar, SolicitacaoRecusar,
    AprovacaoOut, MarkReadOut
)
from services.rental_request_service import RentalRequestService
from settings import ContractSettings, get_contract_settings

router = APIRouter(prefix="/solicitacoes", tags=["solicitacoes"])


@router.post("", response_model=SolicitacaoOut, status_code=status.HTTP_201_CREATED)
def create_solicitacao(
    payload: SolicitacaoCreate,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Un motorista demande la location d'un véhicule disponible"""
    return RentalRequestService.create_request(db, principal, payload, request)


@router.get("", response_model=List[SolicitacaoOut])
def list_solicitacoes(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Toutes les demandes (admin), filtrables par statut"""
    return RentalRequestService.list_all(db, principal, status_filter)


@router.get("/minhas", response_model=List[SolicitacaoOut])
def list_minhas(
    unread: int = 0,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return RentalRequestService.list_for_driver(db, principal, unread_only=unread == 1)


@router.get("/recebidas", response_model=List[SolicitacaoOut])
def list_recebidas(
    unread: int = 0,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return RentalRequestService.list_received(db, principal, unread_only=unread == 1)


@router.get("/{solicitacao_id}", response_model=SolicitacaoOut)
def get_solicitacao(
    solicitacao_id: int,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return RentalRequestService.get_request(db, principal, solicitacao_id)


@router.put("/{solicitacao_id}/aprovar", response_model=AprovacaoOut)
def aprovar_solicitacao(
    solicitacao_id: int,
    payload: SolicitacaoAprovar,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    settings: ContractSettings = Depends(get_contract_settings),
    db: Session = Depends(get_db)
):
    """
    Approuve la demande: crée l'aluguel et le contrat en négociation.
    Les dados legais des deux parties peuvent être complétés dans le même appel.
    """
    aluguel, contrato = RentalRequestService.approve_request(
        db, principal, solicitacao_id, payload, settings, request
    )
    return AprovacaoOut(
        message="Solicitação aprovada e contrato gerado",
        solicitacao_id=solicitacao_id,
        aluguel_id=aluguel.id,
        contrato_id=contrato.id
    )


@router.put("/{solicitacao_id}/recusar", response_model=SolicitacaoOut)
def recusar_solicitacao(
    solicitacao_id: int,
    request: Request,
    payload: Optional[SolicitacaoRecusar] = None,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return RentalRequestService.refuse_request(
        db, principal, solicitacao_id, payload or SolicitacaoRecusar(), request
    )


@router.patch("/{solicitacao_id}/mark-read/{parte}", response_model=MarkReadOut)
def mark_read_solicitacao(
    solicitacao_id: int,
    parte: PartySide,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    solicitacao = RentalRequestService.mark_read(db, principal, solicitacao_id, parte)
    return MarkReadOut(id=solicitacao.id, visto_por=parte.value)
