"""
Service de notifications utilisateur
Compteur de la cloche dérivé des drapeaux de lecture des solicitações et contratos
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import AnyPrincipal
from models import SolicitacaoAluguel, Contrato, Veiculo


class BadgeService:
    """
    Compteur de non-lus, calculé à chaque appel depuis l'état persisté.
    Aucun cache: chaque transition commit ses drapeaux avant de répondre.
    """

    @staticmethod
    def count_driver_unread(db: Session, motorista_id: int) -> int:
        solicitacoes = db.query(func.count(SolicitacaoAluguel.id)).filter(
            SolicitacaoAluguel.motorista_id == motorista_id,
            SolicitacaoAluguel.visto_por_motorista == 0
        ).scalar()
        contratos = db.query(func.count(Contrato.id)).filter(
            Contrato.motorista_id == motorista_id,
            Contrato.visto_por_motorista == 0
        ).scalar()
        return int(solicitacoes or 0) + int(contratos or 0)

    @staticmethod
    def count_owner_unread(db: Session, proprietario_id: int) -> int:
        solicitacoes = db.query(func.count(SolicitacaoAluguel.id)).join(
            Veiculo, Veiculo.id == SolicitacaoAluguel.veiculo_id
        ).filter(
            Veiculo.proprietario_id == proprietario_id,
            SolicitacaoAluguel.visto_por_proprietario == 0
        ).scalar()
        contratos = db.query(func.count(Contrato.id)).join(
            Veiculo, Veiculo.id == Contrato.veiculo_id
        ).filter(
            Veiculo.proprietario_id == proprietario_id,
            Contrato.visto_por_proprietario == 0
        ).scalar()
        return int(solicitacoes or 0) + int(contratos or 0)

    @staticmethod
    def get_unread_count(db: Session, principal: AnyPrincipal) -> int:
        """
        Motorista: ses solicitações et contratos non vus.
        Proprietário ou admin: ceux des véhicules dont il est proprietário.
        """
        if principal.is_driver:
            return BadgeService.count_driver_unread(db, principal.id)
        return BadgeService.count_owner_unread(db, principal.id)
