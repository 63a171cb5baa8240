"""
Workflow des solicitações de aluguel: création, refus, approbation.

L'approbation s'exécute dans une seule transaction: aluguel, dados legais et
contrat sont créés ensemble ou pas du tout.
"""
import logging
from typing import List, Optional, Tuple

from fastapi import Request
from sqlalchemy.orm import Session, joinedload

from audit_logger import AuditLogger
from auth import AnyPrincipal
from constants import ERROR_MESSAGES, DEFAULT_LIST_LIMIT
from contract_document_service import (
    build_contract_snapshot, compute_rental_days, compute_total, validate_daily_rate,
    create_contract_document_service
)
from enums import (
    ActionType, EntityType, RequestStatus, RentalStatus, ContractStatus,
    VehicleStatus, PartySide, ACTIVE_RENTAL_STATUSES
)
from error_handlers import (
    ConflictError, ForbiddenError, NotFoundError, UnprocessableError, ValidationError
)
from models import (
    SolicitacaoAluguel, Aluguel, Contrato, Veiculo, Motorista, Proprietario
)
from permission_service import (
    assert_driver, assert_owner_or_admin, assert_request_party,
    assert_is_specific_driver, assert_is_specific_owner
)
from schemas import SolicitacaoCreate, SolicitacaoAprovar, SolicitacaoRecusar
from services.legal_profile_service import LegalProfileService
from settings import ContractSettings

logger = logging.getLogger(__name__)


class RentalRequestService:

    @staticmethod
    def _get_request(db: Session, solicitacao_id: int) -> SolicitacaoAluguel:
        solicitacao = db.get(SolicitacaoAluguel, solicitacao_id)
        if solicitacao is None:
            raise NotFoundError(ERROR_MESSAGES["request_not_found"])
        return solicitacao

    @staticmethod
    def _assert_pending(solicitacao: SolicitacaoAluguel) -> None:
        # Une demande approuvée ou refusée ne peut plus changer d'état
        if solicitacao.status != RequestStatus.PENDENTE.value:
            raise ConflictError(
                ERROR_MESSAGES["request_not_pending"],
                detalhes=f"status atual: {solicitacao.status}"
            )

    # ==================== LECTURE ====================

    @staticmethod
    def get_request(db: Session, principal: AnyPrincipal, solicitacao_id: int) -> SolicitacaoAluguel:
        solicitacao = RentalRequestService._get_request(db, solicitacao_id)
        assert_request_party(db, principal, solicitacao)
        return solicitacao

    @staticmethod
    def list_for_driver(db: Session, principal: AnyPrincipal, unread_only: bool = False) -> List[SolicitacaoAluguel]:
        assert_driver(principal)
        query = db.query(SolicitacaoAluguel).options(
            joinedload(SolicitacaoAluguel.veiculo)
        ).filter(SolicitacaoAluguel.motorista_id == principal.id)

        if unread_only:
            query = query.filter(SolicitacaoAluguel.visto_por_motorista == 0)

        return query.order_by(SolicitacaoAluguel.id.desc()).limit(DEFAULT_LIST_LIMIT).all()

    @staticmethod
    def list_received(db: Session, principal: AnyPrincipal, unread_only: bool = False) -> List[SolicitacaoAluguel]:
        """Demandes reçues sur les véhicules du proprietário (toutes pour un admin)"""
        if not (principal.is_owner or principal.is_admin):
            raise ForbiddenError(ERROR_MESSAGES["only_owners"])

        query = db.query(SolicitacaoAluguel).options(
            joinedload(SolicitacaoAluguel.veiculo)
        ).join(Veiculo, Veiculo.id == SolicitacaoAluguel.veiculo_id)

        if principal.is_owner:
            query = query.filter(Veiculo.proprietario_id == principal.id)
        if unread_only:
            query = query.filter(SolicitacaoAluguel.visto_por_proprietario == 0)

        return query.order_by(SolicitacaoAluguel.id.desc()).limit(DEFAULT_LIST_LIMIT).all()

    @staticmethod
    def list_all(db: Session, principal: AnyPrincipal, status: Optional[RequestStatus] = None) -> List[SolicitacaoAluguel]:
        if not principal.is_admin:
            raise ForbiddenError(ERROR_MESSAGES["forbidden"])
        query = db.query(SolicitacaoAluguel).options(joinedload(SolicitacaoAluguel.veiculo))
        if status:
            query = query.filter(SolicitacaoAluguel.status == status.value)
        return query.order_by(SolicitacaoAluguel.id.desc()).limit(DEFAULT_LIST_LIMIT).all()

    # ==================== CRÉATION ====================

    @staticmethod
    def create_request(
        db: Session,
        principal: AnyPrincipal,
        payload: SolicitacaoCreate,
        request: Optional[Request] = None
    ) -> SolicitacaoAluguel:
        assert_driver(principal)

        veiculo = db.get(Veiculo, payload.veiculo_id)
        if veiculo is None:
            raise NotFoundError(ERROR_MESSAGES["vehicle_not_found"])
        if veiculo.status != VehicleStatus.DISPONIVEL.value:
            raise ValidationError(
                ERROR_MESSAGES["vehicle_unavailable"],
                detalhes=f"status do veículo: {veiculo.status}"
            )

        try:
            solicitacao = SolicitacaoAluguel(
                motorista_id=principal.id,
                veiculo_id=veiculo.id,
                data_inicio=payload.data_inicio,
                data_fim=payload.data_fim,
                status=RequestStatus.PENDENTE.value,
                visto_por_motorista=1,
                visto_por_proprietario=0
            )
            db.add(solicitacao)
            db.flush()

            AuditLogger.log_action(
                db=db,
                action=ActionType.CREATE,
                entity_type=EntityType.SOLICITACAO,
                entity_id=solicitacao.id,
                principal=principal,
                description=f"Solicitação #{solicitacao.id} criada para o veículo #{veiculo.id}",
                details={
                    "data_inicio": payload.data_inicio.isoformat(),
                    "data_fim": payload.data_fim.isoformat()
                },
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(solicitacao)
        return solicitacao

    # ==================== REFUS ====================

    @staticmethod
    def refuse_request(
        db: Session,
        principal: AnyPrincipal,
        solicitacao_id: int,
        payload: SolicitacaoRecusar,
        request: Optional[Request] = None
    ) -> SolicitacaoAluguel:
        solicitacao = RentalRequestService._get_request(db, solicitacao_id)
        assert_owner_or_admin(db, principal, solicitacao.veiculo_id)
        RentalRequestService._assert_pending(solicitacao)

        try:
            solicitacao.status = RequestStatus.RECUSADO.value
            solicitacao.motivo_recusa = (payload.motivo or "").strip() or None
            solicitacao.visto_por_motorista = 0
            solicitacao.visto_por_proprietario = 1

            AuditLogger.log_action(
                db=db,
                action=ActionType.REFUSE,
                entity_type=EntityType.SOLICITACAO,
                entity_id=solicitacao.id,
                principal=principal,
                description=f"Solicitação #{solicitacao.id} recusada",
                details={"motivo": solicitacao.motivo_recusa},
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(solicitacao)
        return solicitacao

    # ==================== APPROBATION ====================

    @staticmethod
    def find_conflicting_rental(db: Session, solicitacao: SolicitacaoAluguel) -> Optional[Aluguel]:
        """
        Aluguel actif du même véhicule dont la période chevauche celle de la demande.
        Deux périodes se chevauchent sauf si l'une finit avant le début de l'autre.
        """
        return db.query(Aluguel).filter(
            Aluguel.veiculo_id == solicitacao.veiculo_id,
            Aluguel.status.in_(ACTIVE_RENTAL_STATUSES),
            Aluguel.data_inicio <= solicitacao.data_fim,
            Aluguel.data_prevista_fim >= solicitacao.data_inicio
        ).first()

    @staticmethod
    def approve_request(
        db: Session,
        principal: AnyPrincipal,
        solicitacao_id: int,
        payload: SolicitacaoAprovar,
        settings: ContractSettings,
        request: Optional[Request] = None
    ) -> Tuple[Aluguel, Contrato]:
        """
        Approuve la demande et crée aluguel + contrat en négociation.

        La vérification de conflit et l'insertion de l'aluguel ne sont pas
        isolées au-delà du niveau par défaut de la base: deux approbations
        concurrentes de périodes qui se chevauchent peuvent toutes deux réussir.
        """
        solicitacao = RentalRequestService._get_request(db, solicitacao_id)
        assert_owner_or_admin(db, principal, solicitacao.veiculo_id)
        RentalRequestService._assert_pending(solicitacao)

        try:
            # Relecture dans la transaction
            db.refresh(solicitacao)
            RentalRequestService._assert_pending(solicitacao)

            dias = compute_rental_days(solicitacao.data_inicio, solicitacao.data_fim)
            valor_por_dia = validate_daily_rate(payload.valor_por_dia)
            valor_total = compute_total(dias, valor_por_dia)

            conflito = RentalRequestService.find_conflicting_rental(db, solicitacao)
            if conflito is not None:
                raise ConflictError(
                    ERROR_MESSAGES["rental_conflict"],
                    detalhes=(
                        f"aluguel #{conflito.id} de {conflito.data_inicio.isoformat()} "
                        f"a {conflito.data_prevista_fim.isoformat()}"
                    )
                )

            solicitacao.status = RequestStatus.APROVADO.value
            solicitacao.visto_por_motorista = 0
            solicitacao.visto_por_proprietario = 1

            veiculo = db.get(Veiculo, solicitacao.veiculo_id)
            aluguel = Aluguel(
                solicitacao_id=solicitacao.id,
                motorista_id=solicitacao.motorista_id,
                veiculo_id=solicitacao.veiculo_id,
                data_inicio=solicitacao.data_inicio,
                data_prevista_fim=solicitacao.data_fim,
                valor_total=valor_total,
                status=RentalStatus.APROVADO.value
            )
            db.add(aluguel)
            db.flush()

            motorista = db.get(Motorista, solicitacao.motorista_id)
            if motorista is None:
                raise NotFoundError(ERROR_MESSAGES["driver_not_found"])
            proprietario = db.get(Proprietario, veiculo.proprietario_id)
            if proprietario is None:
                raise NotFoundError(ERROR_MESSAGES["owner_not_found"])

            motorista_legal = LegalProfileService.upsert(
                db, PartySide.MOTORISTA, motorista.id, payload.dados_legais
            )
            proprietario_legal = LegalProfileService.upsert(
                db, PartySide.PROPRIETARIO, proprietario.id, payload.dados_legais_proprietario
            )

            faltantes = {}
            missing_motorista = LegalProfileService.missing_fields(motorista_legal)
            missing_proprietario = LegalProfileService.missing_fields(proprietario_legal)
            if missing_motorista:
                faltantes["motorista"] = missing_motorista
            if missing_proprietario:
                faltantes["proprietario"] = missing_proprietario
            if faltantes:
                raise UnprocessableError(
                    ERROR_MESSAGES["incomplete_legal_data"],
                    detalhes="; ".join(f"{parte}: {', '.join(campos)}" for parte, campos in faltantes.items()),
                    campos_faltantes=faltantes
                )

            snapshot = build_contract_snapshot(
                aluguel=aluguel,
                veiculo=veiculo,
                proprietario=proprietario,
                proprietario_legal=proprietario_legal,
                motorista=motorista,
                motorista_legal=motorista_legal,
                valor_por_dia=valor_por_dia,
                forma_pagamento=payload.forma_pagamento.value,
                local_retirada=payload.local_retirada,
                local_devolucao=payload.local_devolucao,
                settings=settings
            )
            documento = create_contract_document_service().render(snapshot)

            contrato = Contrato(
                aluguel_id=aluguel.id,
                solicitacao_id=solicitacao.id,
                motorista_id=solicitacao.motorista_id,
                veiculo_id=solicitacao.veiculo_id,
                status=ContractStatus.NEGOCIANDO.value,
                dados_json=snapshot.model_dump(mode="json"),
                arquivo_html=documento.content,
                documento_hash=documento.content_hash,
                visto_por_motorista=1,
                visto_por_proprietario=1
            )
            db.add(contrato)
            db.flush()

            AuditLogger.log_action(
                db=db,
                action=ActionType.APPROVE,
                entity_type=EntityType.SOLICITACAO,
                entity_id=solicitacao.id,
                principal=principal,
                description=(
                    f"Solicitação #{solicitacao.id} aprovada: aluguel #{aluguel.id}, contrato #{contrato.id}"
                ),
                details={
                    "aluguel_id": aluguel.id,
                    "contrato_id": contrato.id,
                    "dias": snapshot.aluguel.dias,
                    "valor_total": snapshot.aluguel.valor_total
                },
                request=request
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Solicitação %s aprovada (aluguel %s, contrato %s)",
            solicitacao.id, aluguel.id, contrato.id
        )
        db.refresh(aluguel)
        db.refresh(contrato)
        return aluguel, contrato


    # ==================== LECTURE PAR PARTIE ====================

    @staticmethod
    def mark_read(db: Session, principal: AnyPrincipal, solicitacao_id: int, parte: PartySide) -> SolicitacaoAluguel:
        """Passe le flag vu de la partie appelante à 1, sans toucher l'autre partie"""
        solicitacao = RentalRequestService._get_request(db, solicitacao_id)

        if parte == PartySide.MOTORISTA:
            assert_is_specific_driver(principal, solicitacao.motorista_id)
            solicitacao.visto_por_motorista = 1
        else:
            assert_is_specific_owner(db, principal, solicitacao.veiculo_id)
            solicitacao.visto_por_proprietario = 1

        db.commit()
        db.refresh(solicitacao)
        return solicitacao
