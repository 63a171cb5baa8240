"""
Enums partagés pour l'application Drive Rent Hub
Centralisation de toutes les énumérations pour éviter la duplication
"""
import enum


class PrincipalRole(str, enum.Enum):
    """Rôles portés par le jeton d'authentification"""
    MOTORISTA = "motorista"
    PROPRIETARIO = "proprietario"
    ADMIN = "admin"


# Les administrateurs historiques portent le rôle "comum" ou "super"
ADMIN_ROLES = {"admin", "comum", "super"}


class RequestStatus(str, enum.Enum):
    """Statuts d'une solicitação de aluguel"""
    PENDENTE = "pendente"
    APROVADO = "aprovado"
    RECUSADO = "recusado"


class RentalStatus(str, enum.Enum):
    """Statuts d'un aluguel"""
    APROVADO = "aprovado"
    AGUARDANDO_ASSINATURA = "aguardando_assinatura"
    ASSINADO = "assinado"
    EM_ANDAMENTO = "em_andamento"
    FINALIZADO = "finalizado"
    CANCELADO = "cancelado"


# Un aluguel dans l'un de ces statuts bloque le véhicule sur sa période
ACTIVE_RENTAL_STATUSES = (
    RentalStatus.APROVADO.value,
    RentalStatus.AGUARDANDO_ASSINATURA.value,
    RentalStatus.ASSINADO.value,
    RentalStatus.EM_ANDAMENTO.value,
)


class ContractStatus(str, enum.Enum):
    """Cycle de vie d'un contrat: negociando -> aguardando_assinatura -> assinado"""
    NEGOCIANDO = "negociando"
    AGUARDANDO_ASSINATURA = "aguardando_assinatura"
    ASSINADO = "assinado"


class VehicleStatus(str, enum.Enum):
    """Statuts d'un véhicule"""
    DISPONIVEL = "disponivel"
    ALUGADO = "alugado"
    MANUTENCAO = "manutencao"
    INATIVO = "inativo"


class MaritalStatus(str, enum.Enum):
    """Estado civil accepté dans les dados legais"""
    SOLTEIRO = "solteiro"
    CASADO = "casado"
    DIVORCIADO = "divorciado"
    VIUVO = "viuvo"
    UNIAO_ESTAVEL = "uniao_estavel"


class PaymentMethod(str, enum.Enum):
    """Formes de paiement proposées au motorista"""
    PIX = "pix"
    DINHEIRO = "dinheiro"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    TRANSFERENCIA = "transferencia"
    BOLETO = "boleto"


class PartySide(str, enum.Enum):
    """Partie d'une entité dont on bascule le drapeau de lecture"""
    MOTORISTA = "motorista"
    PROPRIETARIO = "proprietario"


class ActionType(str, enum.Enum):
    """Types d'actions pour l'audit logging"""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    APPROVE = "APPROVE"
    REFUSE = "REFUSE"
    PUBLISH = "PUBLISH"
    SIGN = "SIGN"
    UPSERT = "UPSERT"


class EntityType(str, enum.Enum):
    """Types d'entités dans l'application"""
    SOLICITACAO = "SOLICITACAO"
    CONTRATO = "CONTRATO"
    DADOS_LEGAIS = "DADOS_LEGAIS"
