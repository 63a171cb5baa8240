"""
Tests unitaires: calcul des jours et du total, fusion du snapshot, rendu du document
"""
import hashlib
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from contract_document_service import (
    apply_patch, build_contract_snapshot, compute_rental_days, compute_total,
    create_contract_document_service, deep_merge, format_endereco, validate_daily_rate
)
from error_handlers import UnprocessableError
from settings import ContractSettings

from conftest import LEGAL_MOTORISTA, LEGAL_PROPRIETARIO


def _snapshot(valor_por_dia=100.0, local_retirada="Rua das Flores, 120", legal=True):
    aluguel = SimpleNamespace(id=7, data_inicio=date(2025, 1, 1), data_prevista_fim=date(2025, 1, 5))
    veiculo = SimpleNamespace(id=1, marca="Toyota", modelo="Corolla", ano=2022,
                              placa="ABC1D23", renavam="00123456789", cor="Prata")
    proprietario = SimpleNamespace(id=1, nome="Ana Souza", email="ana@exemplo.com",
                                   telefone=None, cpf_cnpj="123.456.789-00")
    motorista = SimpleNamespace(id=1, nome="Carlos Pereira", email="carlos@exemplo.com",
                                telefone=None, cpf="987.654.321-00", cnh_numero="01234567890")
    return build_contract_snapshot(
        aluguel=aluguel,
        veiculo=veiculo,
        proprietario=proprietario,
        proprietario_legal=SimpleNamespace(**LEGAL_PROPRIETARIO) if legal else None,
        motorista=motorista,
        motorista_legal=SimpleNamespace(**LEGAL_MOTORISTA) if legal else None,
        valor_por_dia=valor_por_dia,
        forma_pagamento="pix",
        local_retirada=local_retirada,
        local_devolucao="Aeroporto de Congonhas",
        settings=ContractSettings(banco="Banco Teste", chave_pix="pix@driverent.test"),
    )


class TestRentalDays:
    """Nombre de jours facturés"""

    def test_consecutive_days_count_as_one(self):
        assert compute_rental_days(date(2025, 1, 1), date(2025, 1, 2)) == 1

    def test_same_day_is_one(self):
        assert compute_rental_days(date(2025, 1, 1), date(2025, 1, 1)) == 1

    def test_reversed_range_is_clamped_to_one(self):
        assert compute_rental_days(date(2025, 1, 10), date(2025, 1, 1)) == 1

    def test_time_of_day_is_ignored(self):
        assert compute_rental_days("2025-01-01T23:30:00", datetime(2025, 1, 5, 0, 10)) == 4

    def test_unparseable_date(self):
        with pytest.raises(UnprocessableError):
            compute_rental_days("amanhã", date(2025, 1, 5))


class TestDailyRate:

    def test_total_is_days_times_rate(self):
        assert compute_total(4, 100) == 400.0

    @pytest.mark.parametrize("dias, valor", [(4, 1e308), (4, 30_000_000), (1, 100_000_000)])
    def test_total_must_fit_rental_column(self, dias, valor):
        with pytest.raises(UnprocessableError) as exc_info:
            compute_total(dias, valor)
        assert exc_info.value.status_code == 422

    def test_largest_storable_total(self):
        assert compute_total(1, 99_999_999.99) == 99_999_999.99

    @pytest.mark.parametrize("valor", [0, -10, float("nan"), float("inf"), None, "abc", True])
    def test_invalid_rates(self, valor):
        with pytest.raises(UnprocessableError) as exc_info:
            validate_daily_rate(valor)
        assert exc_info.value.status_code == 422

    def test_numeric_string_is_accepted(self):
        assert validate_daily_rate("89.90") == 89.9


class TestDeepMerge:

    def test_nested_leaf_is_replaced(self):
        base = {"pagamento": {"forma": "pix", "valor_por_dia": 100}, "plataforma": "X"}
        merged = deep_merge(base, {"pagamento": {"valor_por_dia": 150}})
        assert merged == {"pagamento": {"forma": "pix", "valor_por_dia": 150}, "plataforma": "X"}

    def test_inputs_are_not_mutated(self):
        base = {"aluguel": {"local_retirada": "A"}}
        patch = {"aluguel": {"local_retirada": "B"}}
        deep_merge(base, patch)
        assert base == {"aluguel": {"local_retirada": "A"}}
        assert patch == {"aluguel": {"local_retirada": "B"}}

    def test_scalar_patch_overrides_dict(self):
        assert deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


class TestSnapshot:

    def test_computed_fields(self):
        snapshot = _snapshot()
        assert snapshot.aluguel.data_inicio == "2025-01-01"
        assert snapshot.aluguel.data_fim == "2025-01-05"
        assert snapshot.aluguel.dias == 4
        assert snapshot.aluguel.valor_total == 400.0
        assert snapshot.pagamento.forma == "pix"
        assert snapshot.pagamento.dados_bancarios.banco == "Banco Teste"

    def test_parties_carry_legal_data(self):
        snapshot = _snapshot()
        assert snapshot.locador.nome == "Ana Souza"
        assert snapshot.locador.documento == "123.456.789-00"
        assert snapshot.locador.endereco_cidade == "Rio de Janeiro"
        assert snapshot.motorista.rg == "12.345.678-9"
        assert snapshot.motorista.cnh_numero == "01234567890"
        assert snapshot.motorista.endereco == (
            "Rua das Flores, 120, Centro, São Paulo - SP, CEP 01001-000"
        )

    def test_apply_patch_recomputes_total(self):
        data = _snapshot().model_dump(mode="json")
        patched = apply_patch(data, {"pagamento": {"valor_por_dia": 150}})
        assert patched.aluguel.dias == 4
        assert patched.aluguel.valor_total == 600.0
        # le snapshot d'origine reste intact
        assert data["pagamento"]["valor_por_dia"] == 100.0

    def test_apply_patch_rejects_non_positive_rate(self):
        data = _snapshot().model_dump(mode="json")
        with pytest.raises(UnprocessableError):
            apply_patch(data, {"pagamento": {"valor_por_dia": 0}})

    def test_format_endereco_without_profile(self):
        assert format_endereco(None) is None


class TestDocument:

    def test_render_contains_terms(self):
        document = create_contract_document_service().render(_snapshot())
        assert document.format == "html"
        assert "CONTRATO DE LOCAÇÃO DE AUTOMÓVEL" in document.content
        assert "01/01/2025" in document.content
        assert "05/01/2025" in document.content
        assert "R$ 400,00" in document.content
        assert "Toyota/Corolla" in document.content

    def test_hash_matches_content(self):
        document = create_contract_document_service().render(_snapshot())
        assert document.content_hash == hashlib.sha256(document.content.encode("utf-8")).hexdigest()

    def test_thousands_formatting(self):
        document = create_contract_document_service().render(_snapshot(valor_por_dia=308.625))
        assert "R$ 1.234,50" in document.content

    def test_user_text_is_escaped(self):
        document = create_contract_document_service().render(_snapshot(local_retirada="<script>x</script>"))
        assert "<script>" not in document.content
        assert "&lt;script&gt;" in document.content

    def test_missing_legal_data_uses_placeholders(self):
        document = create_contract_document_service().render(_snapshot(legal=False))
        assert "[rg]" in document.content

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            create_contract_document_service().render(_snapshot(), format="pdf")
