"""
Machine à états des contratos: negociando -> aguardando_assinatura -> assinado
"""
import copy
import datetime
import logging
from typing import List, Optional

from fastapi import Request
from sqlalchemy.orm import Session, joinedload

from audit_logger import AuditLogger
from auth import AnyPrincipal
from constants import ERROR_MESSAGES, DEFAULT_LIST_LIMIT
from contract_document_service import apply_patch, create_contract_document_service
from enums import ActionType, EntityType, ContractStatus, RentalStatus, PartySide
from error_handlers import ConflictError, ForbiddenError, NotFoundError, ValidationError
from models import Contrato, ContratoRevisao, Aluguel, Veiculo
from permission_service import (
    assert_owner_or_admin, assert_contract_reader, assert_contract_driver,
    assert_driver, assert_is_specific_driver, assert_is_specific_owner
)
from schemas import ContratoEditPatch

logger = logging.getLogger(__name__)


class ContractService:

    @staticmethod
    def _get_contract(db: Session, contrato_id: int) -> Contrato:
        contrato = db.get(Contrato, contrato_id)
        if contrato is None:
            raise NotFoundError(ERROR_MESSAGES["contract_not_found"])
        return contrato

    @staticmethod
    def get_contract(db: Session, principal: AnyPrincipal, contrato_id: int) -> Contrato:
        contrato = ContractService._get_contract(db, contrato_id)
        assert_contract_reader(db, principal, contrato)
        return contrato

    @staticmethod
    def list_for_driver(db: Session, principal: AnyPrincipal, unread_only: bool = False) -> List[Contrato]:
        assert_driver(principal)
        query = db.query(Contrato).options(
            joinedload(Contrato.veiculo)
        ).filter(Contrato.motorista_id == principal.id)
        if unread_only:
            query = query.filter(Contrato.visto_por_motorista == 0)
        return query.order_by(Contrato.id.desc()).limit(DEFAULT_LIST_LIMIT).all()

    @staticmethod
    def list_received(db: Session, principal: AnyPrincipal, unread_only: bool = False) -> List[Contrato]:
        if not (principal.is_owner or principal.is_admin):
            raise ForbiddenError(ERROR_MESSAGES["only_owners"])
        query = db.query(Contrato).options(
            joinedload(Contrato.veiculo)
        ).join(Veiculo, Veiculo.id == Contrato.veiculo_id)
        if principal.is_owner:
            query = query.filter(Veiculo.proprietario_id == principal.id)
        if unread_only:
            query = query.filter(Contrato.visto_por_proprietario == 0)
        return query.order_by(Contrato.id.desc()).limit(DEFAULT_LIST_LIMIT).all()

    @staticmethod
    def list_revisions(db: Session, principal: AnyPrincipal, contrato_id: int) -> List[ContratoRevisao]:
        contrato = ContractService.get_contract(db, principal, contrato_id)
        return list(contrato.revisoes)

    # ==================== ÉDITION / PUBLICATION ====================

    @staticmethod
    def _patch_dict(patch: Optional[ContratoEditPatch]) -> dict:
        """Patch filtré: seules les clés autorisées et renseignées sont conservées"""
        if patch is None:
            return {}
        data = patch.model_dump(exclude_none=True)
        return {key: value for key, value in data.items() if value}

    @staticmethod
    def _apply_and_render(contrato: Contrato, patch: dict) -> dict:
        """Fusionne le patch, recalcule les totaux et régénère le document. Retourne l'ancien snapshot."""
        anterior = copy.deepcopy(contrato.dados_json)
        snapshot = apply_patch(anterior, patch)
        documento = create_contract_document_service().render(snapshot)

        # Nouvel objet pour que la colonne JSON soit détectée comme modifiée
        contrato.dados_json = snapshot.model_dump(mode="json")
        contrato.arquivo_html = documento.content
        contrato.documento_hash = documento.content_hash
        contrato.aluguel.valor_total = snapshot.aluguel.valor_total
        return anterior

    @staticmethod
    def _record_revision(db: Session, contrato: Contrato, acao: str, principal: AnyPrincipal, anterior: dict):
        db.add(ContratoRevisao(
            contrato_id=contrato.id,
            acao=acao,
            autor_id=principal.id,
            autor_role=principal.role,
            dados_anteriores=anterior,
            dados_novos=contrato.dados_json
        ))

    @staticmethod
    def edit_contract(
        db: Session,
        principal: AnyPrincipal,
        contrato_id: int,
        patch: ContratoEditPatch,
        request: Optional[Request] = None
    ) -> Contrato:
        contrato = ContractService._get_contract(db, contrato_id)
        assert_owner_or_admin(db, principal, contrato.veiculo_id)

        if contrato.status != ContractStatus.NEGOCIANDO.value:
            raise ConflictError(
                ERROR_MESSAGES["contract_not_negotiating"],
                detalhes=f"status atual: {contrato.status}"
            )

        patch_data = ContractService._patch_dict(patch)
        if not patch_data:
            raise ValidationError(ERROR_MESSAGES["nothing_to_update"])

        try:
            anterior = ContractService._apply_and_render(contrato, patch_data)
            ContractService._record_revision(db, contrato, "editar", principal, anterior)

            AuditLogger.log_action(
                db=db,
                action=ActionType.UPDATE,
                entity_type=EntityType.CONTRATO,
                entity_id=contrato.id,
                principal=principal,
                description=f"Contrato #{contrato.id} editado",
                details={"patch": patch_data},
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(contrato)
        return contrato

    @staticmethod
    def publish_contract(
        db: Session,
        principal: AnyPrincipal,
        contrato_id: int,
        patch: Optional[ContratoEditPatch] = None,
        request: Optional[Request] = None
    ) -> Contrato:
        """
        Fige les termes et envoie le contrat au motorista pour signature.
        Le corps est facultatif: un patch vide publie le snapshot tel quel.
        """
        contrato = ContractService._get_contract(db, contrato_id)
        assert_owner_or_admin(db, principal, contrato.veiculo_id)

        if contrato.status != ContractStatus.NEGOCIANDO.value:
            raise ConflictError(
                ERROR_MESSAGES["contract_not_negotiating"],
                detalhes=f"status atual: {contrato.status}"
            )

        patch_data = ContractService._patch_dict(patch)

        try:
            anterior = ContractService._apply_and_render(contrato, patch_data)
            ContractService._record_revision(db, contrato, "publicar", principal, anterior)

            contrato.status = ContractStatus.AGUARDANDO_ASSINATURA.value
            contrato.visto_por_motorista = 0
            contrato.visto_por_proprietario = 1
            contrato.aluguel.status = RentalStatus.AGUARDANDO_ASSINATURA.value

            AuditLogger.log_action(
                db=db,
                action=ActionType.PUBLISH,
                entity_type=EntityType.CONTRATO,
                entity_id=contrato.id,
                principal=principal,
                description=f"Contrato #{contrato.id} publicado para assinatura",
                details={"patch": patch_data} if patch_data else None,
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(contrato)
        return contrato

    # ==================== SIGNATURE ====================

    @staticmethod
    def sign_contract(
        db: Session,
        principal: AnyPrincipal,
        contrato_id: int,
        request: Optional[Request] = None
    ) -> Contrato:
        """
        Signature par le motorista du contrat. Accepté depuis aguardando_assinatura
        et aussi directement depuis negociando.
        """
        contrato = ContractService._get_contract(db, contrato_id)
        assert_contract_driver(principal, contrato)

        if contrato.status not in (ContractStatus.AGUARDANDO_ASSINATURA.value, ContractStatus.NEGOCIANDO.value):
            raise ConflictError(
                ERROR_MESSAGES["contract_not_signable"],
                detalhes=f"status atual: {contrato.status}"
            )

        ip = request.client.host if request is not None and request.client else None

        try:
            contrato.status = ContractStatus.ASSINADO.value
            contrato.assinatura_data = datetime.datetime.utcnow()
            contrato.assinatura_ip = ip
            contrato.visto_por_motorista = 1
            contrato.visto_por_proprietario = 0
            aluguel = db.get(Aluguel, contrato.aluguel_id)
            aluguel.status = RentalStatus.ASSINADO.value

            AuditLogger.log_action(
                db=db,
                action=ActionType.SIGN,
                entity_type=EntityType.CONTRATO,
                entity_id=contrato.id,
                principal=principal,
                description=f"Contrato #{contrato.id} assinado",
                details={"ip": ip},
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Contrato %s assinado pelo motorista %s", contrato_id, principal.id)
        db.refresh(contrato)
        return contrato

    # ==================== LECTURE PAR PARTIE ====================

    @staticmethod
    def mark_read(db: Session, principal: AnyPrincipal, contrato_id: int, parte: PartySide) -> Contrato:
        contrato = ContractService._get_contract(db, contrato_id)

        if parte == PartySide.MOTORISTA:
            assert_is_specific_driver(principal, contrato.motorista_id)
            contrato.visto_por_motorista = 1
        else:
            assert_is_specific_owner(db, principal, contrato.veiculo_id)
            contrato.visto_por_proprietario = 1

        db.commit()
        db.refresh(contrato)
        return contrato
