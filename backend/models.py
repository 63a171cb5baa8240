from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Text, Numeric, JSON, Index
from sqlalchemy.orm import relationship
from database import Base
import datetime

# Import centralisé des enums
from enums import RequestStatus, RentalStatus, ContractStatus, VehicleStatus


# ==================== PARTIES (collaborateurs externes) ====================

class Proprietario(Base):
    __tablename__ = "proprietarios"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True)
    telefone = Column(String(50), nullable=True)
    cpf_cnpj = Column(String(20), nullable=True)
    status = Column(String(20), default="aprovado")
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)

    veiculos = relationship("Veiculo", back_populates="proprietario")
    dados_legais = relationship("ProprietarioLegal", back_populates="proprietario", uselist=False)


class Motorista(Base):
    __tablename__ = "motoristas"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True)
    telefone = Column(String(50), nullable=True)
    cpf = Column(String(14), nullable=True)
    cnh_numero = Column(String(30), nullable=True)
    cnh_categoria = Column(String(5), nullable=True)
    status = Column(String(20), default="aprovado")
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)

    dados_legais = relationship("MotoristaLegal", back_populates="motorista", uselist=False)


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True)
    role = Column(String(20), default="comum")  # comum, super
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)


class Veiculo(Base):
    __tablename__ = "veiculos"

    id = Column(Integer, primary_key=True, index=True)
    proprietario_id = Column(Integer, ForeignKey("proprietarios.id"), nullable=True)
    marca = Column(String(100))
    modelo = Column(String(100))
    ano = Column(Integer, nullable=True)
    placa = Column(String(10), unique=True)
    renavam = Column(String(20), nullable=True)
    cor = Column(String(50), nullable=True)
    valor_diaria = Column(Numeric(10, 2), nullable=True)
    status = Column(String(20), default=VehicleStatus.INATIVO.value)
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)

    proprietario = relationship("Proprietario", back_populates="veiculos")


# ==================== DADOS LEGAIS ====================

class _DadosLegaisColumns:
    """Colonnes communes aux dados legais du motorista et du proprietário"""
    rg = Column(String(30), nullable=True)
    orgao_expeditor = Column(String(30), nullable=True)
    uf_rg = Column(String(2), nullable=True)
    nacionalidade = Column(String(60), nullable=True)
    estado_civil = Column(String(20), nullable=True)
    profissao = Column(String(100), nullable=True)
    endereco_logradouro = Column(String(255), nullable=True)
    endereco_numero = Column(String(20), nullable=True)
    endereco_bairro = Column(String(100), nullable=True)
    endereco_cidade = Column(String(100), nullable=True)
    endereco_uf = Column(String(2), nullable=True)
    endereco_cep = Column(String(9), nullable=True)
    atualizado_em = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)


class MotoristaLegal(_DadosLegaisColumns, Base):
    __tablename__ = "motoristas_legal"

    motorista_id = Column(Integer, ForeignKey("motoristas.id"), primary_key=True)

    motorista = relationship("Motorista", back_populates="dados_legais")


class ProprietarioLegal(_DadosLegaisColumns, Base):
    __tablename__ = "proprietarios_legal"

    proprietario_id = Column(Integer, ForeignKey("proprietarios.id"), primary_key=True)

    proprietario = relationship("Proprietario", back_populates="dados_legais")


# ==================== WORKFLOW DE LOCATION ====================

class SolicitacaoAluguel(Base):
    __tablename__ = "solicitacoes_aluguel"

    id = Column(Integer, primary_key=True, index=True)
    motorista_id = Column(Integer, ForeignKey("motoristas.id"), nullable=False)
    veiculo_id = Column(Integer, ForeignKey("veiculos.id"), nullable=False)
    data_inicio = Column(Date, nullable=False)
    data_fim = Column(Date, nullable=False)
    status = Column(String(20), default=RequestStatus.PENDENTE.value, nullable=False)
    motivo_recusa = Column(Text, nullable=True)

    # Drapeaux de lecture (0 = non vu, 1 = vu)
    visto_por_motorista = Column(Integer, default=1, nullable=False)
    visto_por_proprietario = Column(Integer, default=0, nullable=False)

    criado_em = Column(DateTime, default=datetime.datetime.utcnow)
    atualizado_em = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    motorista = relationship("Motorista")
    veiculo = relationship("Veiculo")

    __table_args__ = (
        Index('idx_solicitacao_motorista', 'motorista_id'),
        Index('idx_solicitacao_veiculo', 'veiculo_id'),
    )


class Aluguel(Base):
    __tablename__ = "alugueis"

    id = Column(Integer, primary_key=True, index=True)
    solicitacao_id = Column(Integer, ForeignKey("solicitacoes_aluguel.id"), nullable=True)
    motorista_id = Column(Integer, ForeignKey("motoristas.id"), nullable=False)
    veiculo_id = Column(Integer, ForeignKey("veiculos.id"), nullable=False)
    data_inicio = Column(Date, nullable=False)
    data_prevista_fim = Column(Date, nullable=False)
    valor_total = Column(Numeric(10, 2), nullable=True)
    status = Column(String(30), default=RentalStatus.APROVADO.value, nullable=False)
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)

    contrato = relationship("Contrato", back_populates="aluguel", uselist=False)

    __table_args__ = (
        Index('idx_aluguel_veiculo_status', 'veiculo_id', 'status'),
    )


class Contrato(Base):
    __tablename__ = "contratos"

    id = Column(Integer, primary_key=True, index=True)
    aluguel_id = Column(Integer, ForeignKey("alugueis.id"), nullable=False)
    solicitacao_id = Column(Integer, ForeignKey("solicitacoes_aluguel.id"), nullable=True)
    motorista_id = Column(Integer, ForeignKey("motoristas.id"), nullable=False)
    veiculo_id = Column(Integer, ForeignKey("veiculos.id"), nullable=False)
    status = Column(String(30), default=ContractStatus.NEGOCIANDO.value, nullable=False)

    # Snapshot structuré des termes, source de vérité du document
    dados_json = Column(JSON, nullable=False)
    arquivo_html = Column(Text, nullable=True)
    documento_hash = Column(String(64), nullable=True)

    # Signature
    assinatura_data = Column(DateTime, nullable=True)
    assinatura_ip = Column(String(64), nullable=True)

    visto_por_motorista = Column(Integer, default=0, nullable=False)
    visto_por_proprietario = Column(Integer, default=1, nullable=False)

    criado_em = Column(DateTime, default=datetime.datetime.utcnow)
    atualizado_em = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    aluguel = relationship("Aluguel", back_populates="contrato")
    veiculo = relationship("Veiculo")
    revisoes = relationship("ContratoRevisao", back_populates="contrato", order_by="ContratoRevisao.id")

    __table_args__ = (
        Index('idx_contrato_motorista', 'motorista_id'),
        Index('idx_contrato_veiculo', 'veiculo_id'),
    )


class ContratoRevisao(Base):
    """Historique des modifications du snapshot d'un contrat"""
    __tablename__ = "contrato_revisoes"

    id = Column(Integer, primary_key=True, index=True)
    contrato_id = Column(Integer, ForeignKey("contratos.id"), nullable=False)
    acao = Column(String(20), nullable=False)  # editar, publicar
    autor_id = Column(Integer, nullable=False)
    autor_role = Column(String(20), nullable=False)
    dados_anteriores = Column(JSON, nullable=False)
    dados_novos = Column(JSON, nullable=False)
    criado_em = Column(DateTime, default=datetime.datetime.utcnow)

    contrato = relationship("Contrato", back_populates="revisoes")


# ==================== AUDIT ====================

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True)  # Peut être null pour les actions anonymes
    user_role = Column(String(20), nullable=True)
    action = Column(String(20))  # Type d'action effectuée
    entity_type = Column(String(30))  # Type d'entité concernée
    entity_id = Column(Integer, nullable=True)  # ID de l'entité concernée
    description = Column(String(500))  # Description de l'action
    details = Column(Text, nullable=True)  # Détails JSON de l'action
    ip_address = Column(String(50), nullable=True)
    endpoint = Column(String(200), nullable=True)
    method = Column(String(10), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
