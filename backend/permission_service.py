"""
Contrôles d'accès: propriété des véhicules et parties d'un contrat
"""
from typing import Optional
from sqlalchemy.orm import Session

from auth import AnyPrincipal
from constants import ERROR_MESSAGES
from error_handlers import ForbiddenError, NotFoundError
from models import Veiculo, Contrato, SolicitacaoAluguel


def get_vehicle_owner_id(db: Session, veiculo_id: int) -> Optional[int]:
    """Retourne l'ID du proprietário du véhicule, ou None"""
    row = db.query(Veiculo.proprietario_id).filter(Veiculo.id == veiculo_id).first()
    return row[0] if row else None


def assert_owner_or_admin(db: Session, principal: AnyPrincipal, veiculo_id: int) -> None:
    """
    Réussit silencieusement si le principal est admin ou le proprietário du véhicule.
    Lecture seule, aucune écriture.
    """
    owner_id = get_vehicle_owner_id(db, veiculo_id)
    if owner_id is None:
        raise NotFoundError(ERROR_MESSAGES["vehicle_without_owner"])

    if principal.is_admin:
        return

    if not principal.is_owner:
        raise ForbiddenError(ERROR_MESSAGES["only_owners"])

    if principal.id != owner_id:
        raise ForbiddenError(ERROR_MESSAGES["not_vehicle_owner"])


def assert_driver(principal: AnyPrincipal) -> None:
    if not principal.is_driver:
        raise ForbiddenError(ERROR_MESSAGES["only_drivers"])


def assert_contract_reader(db: Session, principal: AnyPrincipal, contrato: Contrato) -> None:
    """Le motorista du contrat, le proprietário du véhicule ou un admin"""
    if principal.is_driver and principal.id == contrato.motorista_id:
        return
    assert_owner_or_admin(db, principal, contrato.veiculo_id)


def assert_contract_driver(principal: AnyPrincipal, contrato: Contrato) -> None:
    """Seul le motorista du contrat peut signer"""
    if not principal.is_driver or principal.id != contrato.motorista_id:
        raise ForbiddenError(ERROR_MESSAGES["not_contract_driver"])


def assert_request_party(db: Session, principal: AnyPrincipal, solicitacao: SolicitacaoAluguel) -> None:
    """Le motorista de la demande, le proprietário du véhicule ou un admin"""
    if principal.is_driver and principal.id == solicitacao.motorista_id:
        return
    assert_owner_or_admin(db, principal, solicitacao.veiculo_id)


def assert_is_specific_driver(principal: AnyPrincipal, motorista_id: int) -> None:
    if not principal.is_driver or principal.id != motorista_id:
        raise ForbiddenError(ERROR_MESSAGES["forbidden"])


def assert_is_specific_owner(db: Session, principal: AnyPrincipal, veiculo_id: int) -> None:
    """Le proprietário du véhicule lui-même (un admin ne passe pas)"""
    owner_id = get_vehicle_owner_id(db, veiculo_id)
    if owner_id is None:
        raise NotFoundError(ERROR_MESSAGES["vehicle_without_owner"])
    if not principal.is_owner or principal.id != owner_id:
        raise ForbiddenError(ERROR_MESSAGES["forbidden"])
