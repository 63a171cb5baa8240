"""
Service de génération des contrats de location avec architecture SOLID

Deux étapes pures:
- build_contract_snapshot: données structurées -> snapshot canonique (dados_json)
- ContractDocumentService.render: snapshot -> document lisible (HTML) + empreinte
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from html import escape
from typing import Any, Dict, Optional
import copy
import hashlib
import math

from constants import DATE_FORMAT_BR, ERROR_MESSAGES, MAX_RENTAL_TOTAL
from error_handlers import UnprocessableError
from schemas import (
    ContractSnapshot, SnapshotAluguel, SnapshotParte, SnapshotVeiculo,
    SnapshotPagamento, SnapshotDadosBancarios
)
from settings import ContractSettings


# ==================== CALCULS ====================

def parse_calendar_date(value: Any) -> date:
    """
    Ramène une date (date, datetime ou chaîne ISO) au jour calendaire.
    L'heure est ignorée pour éviter toute dérive de fuseau.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            pass
    raise UnprocessableError(ERROR_MESSAGES["invalid_dates"], detalhes=f"Data ilegível: {value!r}")


def compute_rental_days(data_inicio: Any, data_fim: Any) -> int:
    """
    Nombre de jours facturés: écart en jours entiers, au minimum 1
    (même jour ou période inversée).
    """
    inicio = parse_calendar_date(data_inicio)
    fim = parse_calendar_date(data_fim)
    return max(1, (fim - inicio).days)


def validate_daily_rate(valor_por_dia: Any) -> float:
    """valor_por_dia doit être un nombre fini strictement positif"""
    if isinstance(valor_por_dia, bool):
        raise UnprocessableError(ERROR_MESSAGES["invalid_daily_rate"])
    try:
        valor = float(valor_por_dia)
    except (TypeError, ValueError):
        raise UnprocessableError(ERROR_MESSAGES["invalid_daily_rate"])
    if not math.isfinite(valor) or valor <= 0:
        raise UnprocessableError(ERROR_MESSAGES["invalid_daily_rate"])
    return valor


def compute_total(dias: int, valor_por_dia: Any) -> float:
    """dias * valor_por_dia, borné par la capacité de Aluguel.valor_total"""
    total = dias * validate_daily_rate(valor_por_dia)
    if not math.isfinite(total) or total > MAX_RENTAL_TOTAL:
        raise UnprocessableError(
            ERROR_MESSAGES["invalid_total"],
            detalhes=f"máximo: {MAX_RENTAL_TOTAL:.2f}"
        )
    return total


def deep_merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fusion récursive: le patch l'emporte sur les feuilles en conflit.
    Ne modifie aucun des deux dictionnaires.
    """
    merged = copy.deepcopy(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def recompute_totals(snapshot: ContractSnapshot) -> ContractSnapshot:
    """Recalcule dias et valor_total depuis les dates et le tarif du snapshot"""
    dias = compute_rental_days(snapshot.aluguel.data_inicio, snapshot.aluguel.data_fim)
    valor_total = compute_total(dias, snapshot.pagamento.valor_por_dia)
    aluguel = snapshot.aluguel.model_copy(update={"dias": dias, "valor_total": valor_total})
    return snapshot.model_copy(update={"aluguel": aluguel})


def apply_patch(snapshot_data: Dict[str, Any], patch: Dict[str, Any]) -> ContractSnapshot:
    """Fusionne un patch filtré sur le snapshot courant puis recalcule les totaux"""
    merged = deep_merge(snapshot_data, patch)
    return recompute_totals(ContractSnapshot.model_validate(merged))


# ==================== SNAPSHOT ====================

def format_endereco(legal) -> Optional[str]:
    """Adresse complète sur une ligne à partir des dados legais"""
    if legal is None:
        return None
    rua = ", ".join(p for p in (legal.endereco_logradouro, legal.endereco_numero) if p)
    partes = [
        rua,
        legal.endereco_bairro,
        " - ".join(p for p in (legal.endereco_cidade, legal.endereco_uf) if p),
        f"CEP {legal.endereco_cep}" if legal.endereco_cep else None,
    ]
    return ", ".join(p for p in partes if p) or None


def _build_party(pessoa, legal, documento: Optional[str], cnh_numero: Optional[str] = None) -> SnapshotParte:
    return SnapshotParte(
        id=pessoa.id,
        nome=pessoa.nome,
        email=pessoa.email,
        telefone=pessoa.telefone,
        documento=documento,
        rg=getattr(legal, "rg", None),
        orgao_expeditor=getattr(legal, "orgao_expeditor", None),
        uf_rg=getattr(legal, "uf_rg", None),
        nacionalidade=getattr(legal, "nacionalidade", None),
        estado_civil=getattr(legal, "estado_civil", None),
        profissao=getattr(legal, "profissao", None),
        endereco=format_endereco(legal),
        endereco_cidade=getattr(legal, "endereco_cidade", None),
        endereco_uf=getattr(legal, "endereco_uf", None),
        cnh_numero=cnh_numero,
    )


def build_contract_snapshot(
    *,
    aluguel,
    veiculo,
    proprietario,
    proprietario_legal,
    motorista,
    motorista_legal,
    valor_por_dia: Any,
    forma_pagamento: str,
    local_retirada: Optional[str],
    local_devolucao: Optional[str],
    settings: ContractSettings
) -> ContractSnapshot:
    """
    Construit le snapshot canonique du contrat.
    dias et valor_total sont toujours calculés ici, jamais repris du client.
    """
    dias = compute_rental_days(aluguel.data_inicio, aluguel.data_prevista_fim)
    valor = validate_daily_rate(valor_por_dia)
    valor_total = compute_total(dias, valor)

    dados_bancarios = None
    if any((settings.banco, settings.agencia, settings.conta, settings.chave_pix)):
        dados_bancarios = SnapshotDadosBancarios(
            banco=settings.banco or None,
            agencia=settings.agencia or None,
            conta=settings.conta or None,
            chave_pix=settings.chave_pix or None,
        )

    return ContractSnapshot(
        aluguel=SnapshotAluguel(
            id=aluguel.id,
            data_inicio=parse_calendar_date(aluguel.data_inicio).isoformat(),
            data_fim=parse_calendar_date(aluguel.data_prevista_fim).isoformat(),
            dias=dias,
            valor_total=valor_total,
            local_retirada=local_retirada,
            local_devolucao=local_devolucao,
        ),
        locador=_build_party(proprietario, proprietario_legal, proprietario.cpf_cnpj),
        motorista=_build_party(motorista, motorista_legal, motorista.cpf, motorista.cnh_numero),
        veiculo=SnapshotVeiculo(
            id=veiculo.id,
            marca=veiculo.marca,
            modelo=veiculo.modelo,
            ano=veiculo.ano,
            placa=veiculo.placa,
            renavam=veiculo.renavam,
            cor=veiculo.cor,
        ),
        pagamento=SnapshotPagamento(
            forma=forma_pagamento,
            valor_por_dia=valor,
            dados_bancarios=dados_bancarios,
        ),
        plataforma=settings.plataforma_nome,
        multa_rescisoria=settings.multa_rescisoria,
    )


# ==================== DOCUMENTS ====================

@dataclass
class RenderedDocument:
    content: str
    content_hash: str
    format: str


class IContractDocumentGenerator(ABC):
    """Interface pour les générateurs de documents de contrat"""

    @abstractmethod
    def render(self, snapshot: ContractSnapshot) -> str:
        """Produit le document à partir du snapshot"""
        pass

    @abstractmethod
    def get_supported_format(self) -> str:
        """Retourne le format supporté par ce générateur"""
        pass


def _txt(value: Any, placeholder: str) -> str:
    if value is None or value == "":
        return escape(f"[{placeholder}]")
    return escape(str(value))


def _data_br(value: str) -> str:
    return parse_calendar_date(value).strftime(DATE_FORMAT_BR)


def _moeda(valor: float) -> str:
    # 1234.5 -> R$ 1.234,50
    texto = f"{valor:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {texto}"


class HtmlContractGenerator(IContractDocumentGenerator):
    """Contrat de locação de automóvel par prazo determinado, au format HTML"""

    def get_supported_format(self) -> str:
        return "html"

    def render(self, snapshot: ContractSnapshot) -> str:
        sections = [
            "<h1>CONTRATO DE LOCAÇÃO DE AUTOMÓVEL POR PRAZO DETERMINADO</h1>",
            self._parties_section(snapshot),
            self._object_section(snapshot),
            self._standard_clauses(),
            self._term_section(snapshot),
            self._payment_section(snapshot),
            self._closing_clauses(snapshot),
            self._signatures_section(snapshot),
        ]
        return "\n".join(sections)

    def _qualificacao(self, parte) -> str:
        return (
            f"{_txt(parte.nome, 'nome')}, {_txt(parte.nacionalidade, 'nacionalidade')}, "
            f"{_txt(parte.estado_civil, 'estado civil')}, {_txt(parte.profissao, 'profissão')}, "
            f"portador(a) do CPF/CNPJ nº {_txt(parte.documento, 'documento')} e RG nº {_txt(parte.rg, 'rg')} "
            f"({_txt(parte.orgao_expeditor, 'órgão')}/{_txt(parte.uf_rg, 'UF')}), "
            f"residente à {_txt(parte.endereco, 'endereço')}"
        )

    def _parties_section(self, s: ContractSnapshot) -> str:
        return (
            "<h2>IDENTIFICAÇÃO DAS PARTES CONTRATANTES</h2>\n"
            f"<p><strong>LOCADOR:</strong> {self._qualificacao(s.locador)}.</p>\n"
            f"<p><strong>LOCATÁRIO:</strong> {self._qualificacao(s.motorista)}.</p>"
        )

    def _object_section(self, s: ContractSnapshot) -> str:
        v = s.veiculo
        return (
            "<h2>CLÁUSULA 1ª – DO OBJETO</h2>\n"
            f"<p>O presente contrato tem por objeto a locação do veículo marca/modelo: "
            f"{_txt(v.marca, 'marca')}/{_txt(v.modelo, 'modelo')}, placa: {_txt(v.placa, 'placa')}, "
            f"RENAVAM: {_txt(v.renavam, 'renavam')}, ano: {_txt(v.ano, 'ano')}, cor: {_txt(v.cor, 'cor')}, "
            f"pertencente ao LOCADOR.</p>"
        )

    def _standard_clauses(self) -> str:
        return (
            "<h2>CLÁUSULA 2ª – DO USO</h2>\n"
            "<p>O veículo será utilizado exclusivamente pelo LOCATÁRIO, sendo vedada sua cessão a terceiros, "
            "sublocação ou uso para fins ilícitos ou não previstos neste contrato.</p>\n"
            "<h2>CLÁUSULA 3ª – DA DEVOLUÇÃO</h2>\n"
            "<p>O LOCATÁRIO se compromete a devolver o veículo nas mesmas condições de uso e conservação "
            "em que o recebeu, respondendo por eventuais danos.</p>"
        )

    def _term_section(self, s: ContractSnapshot) -> str:
        a = s.aluguel
        return (
            "<h2>CLÁUSULA 4ª – DO PRAZO</h2>\n"
            f"<p>O presente contrato terá duração de {a.dias} dia(s), com início em {_data_br(a.data_inicio)} "
            f"e término em {_data_br(a.data_fim)}, podendo ser renovado mediante acordo escrito.</p>\n"
            "<h2>RETIRADA E DEVOLUÇÃO</h2>\n"
            f"<p>Retirada: {_txt(a.local_retirada, 'definir')}</p>\n"
            f"<p>Devolução: {_txt(a.local_devolucao, 'definir')}</p>"
        )

    def _payment_section(self, s: ContractSnapshot) -> str:
        p = s.pagamento
        html = (
            "<h2>CLÁUSULA 5ª – DO PAGAMENTO</h2>\n"
            f"<p>O valor da locação é de {_moeda(p.valor_por_dia)} por dia, totalizando "
            f"{_moeda(s.aluguel.valor_total)} pelo período, pago via {_txt(p.forma, 'forma de pagamento')}.</p>\n"
            "<p>Em caso de atraso, multa de 2% e juros de 1% ao mês, pro rata die.</p>"
        )
        if p.dados_bancarios:
            b = p.dados_bancarios
            html += (
                f"\n<p>Dados para pagamento: banco {_txt(b.banco, 'banco')}, agência {_txt(b.agencia, 'agência')}, "
                f"conta {_txt(b.conta, 'conta')}, chave PIX {_txt(b.chave_pix, 'chave pix')}.</p>"
            )
        return html

    def _closing_clauses(self, s: ContractSnapshot) -> str:
        foro = " - ".join(p for p in (s.locador.endereco_cidade, s.locador.endereco_uf) if p)
        return (
            "<h2>CLÁUSULA 6ª – DA RESCISÃO</h2>\n"
            "<p>Qualquer das partes pode rescindir mediante notificação prévia de 10 dias.</p>\n"
            "<h2>CLÁUSULA 7ª – DA MULTA</h2>\n"
            f"<p>O descumprimento acarretará multa de {_txt(s.multa_rescisoria, 'multa')}.</p>\n"
            "<h2>CLÁUSULA 8ª – DAS MULTAS E INFRAÇÕES</h2>\n"
            "<p>O LOCATÁRIO é responsável por multas e infrações ocorridas durante a locação.</p>\n"
            "<h2>CLÁUSULA 9ª – DO FORO</h2>\n"
            f"<p>Fica eleito o foro da comarca de {_txt(foro, 'comarca')}.</p>"
        )

    def _signatures_section(self, s: ContractSnapshot) -> str:
        return (
            "<p>______________________________<br/>\n"
            f"<strong>LOCADOR</strong><br/>\n{_txt(s.locador.nome, 'nome')} – CPF/CNPJ: {_txt(s.locador.documento, 'documento')}</p>\n"
            "<p>______________________________<br/>\n"
            f"<strong>LOCATÁRIO</strong><br/>\n{_txt(s.motorista.nome, 'nome')} – CPF: {_txt(s.motorista.documento, 'cpf')}</p>"
        )


class ContractDocumentService:
    """Service principal pour le rendu des contrats"""

    def __init__(self):
        self.generators: Dict[str, IContractDocumentGenerator] = {}
        self._register_generators()

    def _register_generators(self):
        """Enregistre les générateurs disponibles"""
        html = HtmlContractGenerator()
        self.generators[html.get_supported_format()] = html

    def render(self, snapshot: ContractSnapshot, format: str = "html") -> RenderedDocument:
        if format not in self.generators:
            available = ', '.join(self.generators.keys())
            raise ValueError(f"Format '{format}' non supporté. Formats disponibles: {available}")

        content = self.generators[format].render(snapshot)
        return RenderedDocument(
            content=content,
            content_hash=hashlib.sha256(content.encode("utf-8")).hexdigest(),
            format=format
        )


# Factory pour créer le service
def create_contract_document_service() -> ContractDocumentService:
    """Factory pour créer le service de génération de documents"""
    return ContractDocumentService()
