"""
Routes API pour les contratos: lecture, négociation, publication et signature
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import AnyPrincipal, get_current_principal
from enums import PartySide
from schemas import (
    ContratoOut, ContratoResumoOut, ContratoRevisaoOut,
    ContratoEditPatch, ContratoPublishPatch, MarkReadOut
)
from services.contract_service import ContractService

router = APIRouter(prefix="/contratos", tags=["contratos"])


@router.get("/minhas", response_model=List[ContratoResumoOut])
def list_minhas(
    unread: int = 0,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.list_for_driver(db, principal, unread_only=unread == 1)


@router.get("/recebidas", response_model=List[ContratoResumoOut])
def list_recebidas(
    unread: int = 0,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.list_received(db, principal, unread_only=unread == 1)


@router.get("/{contrato_id}", response_model=ContratoOut)
def get_contrato(
    contrato_id: int,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.get_contract(db, principal, contrato_id)


@router.get("/{contrato_id}/documento", response_class=HTMLResponse)
def get_documento(
    contrato_id: int,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Document HTML tel que régénéré à la dernière modification"""
    contrato = ContractService.get_contract(db, principal, contrato_id)
    return HTMLResponse(
        content=contrato.arquivo_html or "",
        headers={"X-Document-Hash": contrato.documento_hash or ""}
    )


@router.get("/{contrato_id}/revisoes", response_model=List[ContratoRevisaoOut])
def list_revisoes(
    contrato_id: int,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.list_revisions(db, principal, contrato_id)


@router.put("/{contrato_id}", response_model=ContratoOut)
def edit_contrato(
    contrato_id: int,
    patch: ContratoEditPatch,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Modifie valor_por_dia et lieux tant que le contrat est en négociation"""
    return ContractService.edit_contract(db, principal, contrato_id, patch, request)


@router.post("/{contrato_id}/publicar", response_model=ContratoOut)
def publicar_contrato(
    contrato_id: int,
    request: Request,
    patch: Optional[ContratoPublishPatch] = None,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.publish_contract(db, principal, contrato_id, patch, request)


@router.post("/{contrato_id}/assinar", response_model=ContratoOut)
def assinar_contrato(
    contrato_id: int,
    request: Request,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    return ContractService.sign_contract(db, principal, contrato_id, request)


@router.patch("/{contrato_id}/mark-read/{parte}", response_model=MarkReadOut)
def mark_read_contrato(
    contrato_id: int,
    parte: PartySide,
    principal: AnyPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    contrato = ContractService.mark_read(db, principal, contrato_id, parte)
    return MarkReadOut(id=contrato.id, visto_por=parte.value)
