from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import date, datetime

# Import centralisé des enums
from enums import MaritalStatus, PaymentMethod
from validators import CommonValidators


# ==================== DADOS LEGAIS ====================

class DadosLegaisIn(BaseModel):
    """
    Payload partiel des dados legais d'une partie.
    Les champs vides sont ignorés lors de l'upsert.
    """
    rg: Optional[str] = Field(None, max_length=30)
    orgao_expeditor: Optional[str] = Field(None, max_length=30)
    uf_rg: Optional[str] = Field(None, max_length=2)
    nacionalidade: Optional[str] = Field(None, max_length=60)
    estado_civil: Optional[MaritalStatus] = None
    profissao: Optional[str] = Field(None, max_length=100)
    endereco_logradouro: Optional[str] = Field(None, max_length=255)
    endereco_numero: Optional[str] = Field(None, max_length=20)
    endereco_bairro: Optional[str] = Field(None, max_length=100)
    endereco_cidade: Optional[str] = Field(None, max_length=100)
    endereco_uf: Optional[str] = Field(None, max_length=2)
    endereco_cep: Optional[str] = Field(None, max_length=9)

    @field_validator('estado_civil', mode='before')
    @classmethod
    def empty_estado_civil(cls, v):
        return CommonValidators.blank_to_none(v)

    @field_validator(
        'rg', 'orgao_expeditor', 'nacionalidade', 'profissao',
        'endereco_logradouro', 'endereco_numero', 'endereco_bairro', 'endereco_cidade'
    )
    @classmethod
    def strip_text(cls, v):
        return CommonValidators.blank_to_none(v)

    @field_validator('uf_rg', 'endereco_uf')
    @classmethod
    def validate_uf(cls, v):
        return CommonValidators.validate_uf(v)

    @field_validator('endereco_cep')
    @classmethod
    def validate_cep(cls, v):
        return CommonValidators.validate_cep(v)

    def non_empty_fields(self) -> Dict[str, str]:
        """Champs renseignés, prêts pour l'upsert"""
        data = self.model_dump(exclude_none=True)
        if 'estado_civil' in data:
            data['estado_civil'] = data['estado_civil'].value
        return data


class DadosLegaisOut(BaseModel):
    rg: Optional[str] = None
    orgao_expeditor: Optional[str] = None
    uf_rg: Optional[str] = None
    nacionalidade: Optional[str] = None
    estado_civil: Optional[str] = None
    profissao: Optional[str] = None
    endereco_logradouro: Optional[str] = None
    endereco_numero: Optional[str] = None
    endereco_bairro: Optional[str] = None
    endereco_cidade: Optional[str] = None
    endereco_uf: Optional[str] = None
    endereco_cep: Optional[str] = None
    completo: bool = False
    campos_faltantes: List[str] = []

    model_config = {"from_attributes": True}


# ==================== SOLICITAÇÕES ====================

class SolicitacaoCreate(BaseModel):
    veiculo_id: int = Field(..., gt=0)
    data_inicio: date
    data_fim: date

    @model_validator(mode='after')
    def check_date_order(self):
        if self.data_inicio > self.data_fim:
            raise ValueError('data_inicio deve ser anterior ou igual a data_fim')
        return self


class SolicitacaoAprovar(BaseModel):
    """Corps de l'approbation: termes de paiement, lieux et dados legais des deux parties"""
    valor_por_dia: float
    forma_pagamento: PaymentMethod
    local_retirada: str = Field(..., min_length=1, max_length=255)
    local_devolucao: str = Field(..., min_length=1, max_length=255)
    dados_legais: Optional[DadosLegaisIn] = None
    dados_legais_proprietario: Optional[DadosLegaisIn] = None

    @field_validator('local_retirada', 'local_devolucao')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Este campo não pode ser vazio')
        return v.strip()


class SolicitacaoRecusar(BaseModel):
    motivo: Optional[str] = Field(None, max_length=1000)


class VeiculoResumo(BaseModel):
    id: int
    marca: Optional[str] = None
    modelo: Optional[str] = None
    placa: Optional[str] = None

    model_config = {"from_attributes": True}


class SolicitacaoOut(BaseModel):
    id: int
    motorista_id: int
    veiculo_id: int
    data_inicio: date
    data_fim: date
    status: str
    motivo_recusa: Optional[str] = None
    visto_por_motorista: int
    visto_por_proprietario: int
    criado_em: Optional[datetime] = None
    veiculo: Optional[VeiculoResumo] = None

    model_config = {"from_attributes": True}


class AprovacaoOut(BaseModel):
    message: str
    solicitacao_id: int
    aluguel_id: int
    contrato_id: int


# ==================== SNAPSHOT DU CONTRAT ====================

class SnapshotAluguel(BaseModel):
    id: int
    data_inicio: str
    data_fim: str
    dias: int
    valor_total: float
    local_retirada: Optional[str] = None
    local_devolucao: Optional[str] = None


class SnapshotParte(BaseModel):
    """Identité + dados legais d'une partie, figés dans le contrat"""
    id: int
    nome: str
    email: Optional[str] = None
    telefone: Optional[str] = None
    documento: Optional[str] = None  # CPF ou CNPJ
    rg: Optional[str] = None
    orgao_expeditor: Optional[str] = None
    uf_rg: Optional[str] = None
    nacionalidade: Optional[str] = None
    estado_civil: Optional[str] = None
    profissao: Optional[str] = None
    endereco: Optional[str] = None
    endereco_cidade: Optional[str] = None
    endereco_uf: Optional[str] = None
    cnh_numero: Optional[str] = None


class SnapshotVeiculo(BaseModel):
    id: int
    marca: Optional[str] = None
    modelo: Optional[str] = None
    ano: Optional[int] = None
    placa: Optional[str] = None
    renavam: Optional[str] = None
    cor: Optional[str] = None


class SnapshotDadosBancarios(BaseModel):
    banco: Optional[str] = None
    agencia: Optional[str] = None
    conta: Optional[str] = None
    chave_pix: Optional[str] = None


class SnapshotPagamento(BaseModel):
    forma: str
    valor_por_dia: float
    dados_bancarios: Optional[SnapshotDadosBancarios] = None


class ContractSnapshot(BaseModel):
    """Forme canonique de contratos.dados_json"""
    aluguel: SnapshotAluguel
    locador: SnapshotParte
    motorista: SnapshotParte
    veiculo: SnapshotVeiculo
    pagamento: SnapshotPagamento
    plataforma: Optional[str] = None
    multa_rescisoria: Optional[str] = None


# ==================== PATCHS DE CONTRAT ====================

class AluguelLocaisPatch(BaseModel):
    local_retirada: Optional[str] = Field(None, min_length=1, max_length=255)
    local_devolucao: Optional[str] = Field(None, min_length=1, max_length=255)


class PagamentoValorPatch(BaseModel):
    valor_por_dia: Optional[float] = None


class ContratoEditPatch(BaseModel):
    """
    Patch accepté pendant la négociation: valor_por_dia et lieux.
    Les dates, dias et valor_total ne sont pas modifiables (clés ignorées).
    """
    aluguel: Optional[AluguelLocaisPatch] = None
    pagamento: Optional[PagamentoValorPatch] = None


class ContratoPublishPatch(ContratoEditPatch):
    """Ajustements de dernière minute à la publication (corps facultatif)"""


# ==================== CONTRATS ====================

class ContratoOut(BaseModel):
    id: int
    aluguel_id: int
    solicitacao_id: Optional[int] = None
    motorista_id: int
    veiculo_id: int
    status: str
    dados_json: dict
    arquivo_html: Optional[str] = None
    documento_hash: Optional[str] = None
    assinatura_data: Optional[datetime] = None
    assinatura_ip: Optional[str] = None
    visto_por_motorista: int
    visto_por_proprietario: int
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContratoResumoOut(BaseModel):
    id: int
    aluguel_id: int
    motorista_id: int
    veiculo_id: int
    status: str
    assinatura_data: Optional[datetime] = None
    visto_por_motorista: int
    visto_por_proprietario: int
    criado_em: Optional[datetime] = None
    veiculo: Optional[VeiculoResumo] = None

    model_config = {"from_attributes": True}


class ContratoRevisaoOut(BaseModel):
    id: int
    contrato_id: int
    acao: str
    autor_id: int
    autor_role: str
    dados_anteriores: dict
    dados_novos: dict
    criado_em: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ==================== NOTIFICATIONS ====================

class ContadorOut(BaseModel):
    total_nao_lidas: int


class MarkReadOut(BaseModel):
    ok: bool = True
    id: int
    visto_por: str
