"""
Fixtures communes: base SQLite en mémoire, données de départ et jetons
"""
import os
import sys
from datetime import date

# Avant tout import de l'application: base en mémoire et clé fixe
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("ENVIRONMENT", "test")

# Ajout du chemin pour les imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token
from database import Base, SessionLocal, engine
from models import Proprietario, Motorista, Admin, Veiculo, MotoristaLegal, ProprietarioLegal
from settings import ContractSettings, get_contract_settings


TEST_SETTINGS = ContractSettings(
    plataforma_nome="Drive Rent Hub",
    banco="Banco Teste",
    agencia="0001",
    conta="12345-6",
    chave_pix="pix@driverent.test",
    multa_rescisoria="R$ 1.600,00 (mil e seiscentos reais)",
)

LEGAL_MOTORISTA = {
    "rg": "12.345.678-9",
    "orgao_expeditor": "SSP",
    "uf_rg": "SP",
    "nacionalidade": "brasileira",
    "estado_civil": "solteiro",
    "profissao": "motorista de aplicativo",
    "endereco_logradouro": "Rua das Flores",
    "endereco_numero": "120",
    "endereco_bairro": "Centro",
    "endereco_cidade": "São Paulo",
    "endereco_uf": "SP",
    "endereco_cep": "01001-000",
}

LEGAL_PROPRIETARIO = {
    "rg": "98.765.432-1",
    "orgao_expeditor": "SSP",
    "uf_rg": "RJ",
    "nacionalidade": "brasileira",
    "estado_civil": "casado",
    "profissao": "empresária",
    "endereco_logradouro": "Avenida Atlântica",
    "endereco_numero": "500",
    "endereco_bairro": "Copacabana",
    "endereco_cidade": "Rio de Janeiro",
    "endereco_uf": "RJ",
    "endereco_cep": "22010-000",
}

APPROVAL_PAYLOAD = {
    "valor_por_dia": 100.0,
    "forma_pagamento": "pix",
    "local_retirada": "Rua das Flores, 120",
    "local_devolucao": "Rua das Flores, 120",
}


def token_for(role: str, user_id: int) -> dict:
    """En-têtes Authorization pour un principal donné"""
    token = create_access_token({"id": user_id, "role": role, "nome": f"{role} {user_id}"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_database():
    """Schéma recréé pour chaque test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app():
    from main import app as fastapi_app
    fastapi_app.dependency_overrides[get_contract_settings] = lambda: TEST_SETTINGS
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seed(db):
    """
    Deux proprietários, deux motoristas, un admin.
    Véhicule 1 disponible et véhicule 2 inactif appartiennent au proprietário 1.
    """
    db.add_all([
        Proprietario(id=1, nome="Ana Souza", email="ana@exemplo.com", telefone="11 99999-0001", cpf_cnpj="123.456.789-00"),
        Proprietario(id=2, nome="Bruno Lima", email="bruno@exemplo.com"),
        Motorista(id=1, nome="Carlos Pereira", email="carlos@exemplo.com", cpf="987.654.321-00", cnh_numero="01234567890"),
        Motorista(id=2, nome="Daniela Rocha", email="daniela@exemplo.com"),
        Admin(id=1, nome="Admin", email="admin@exemplo.com", role="super"),
    ])
    db.flush()
    db.add_all([
        Veiculo(id=1, proprietario_id=1, marca="Toyota", modelo="Corolla", ano=2022,
                placa="ABC1D23", renavam="00123456789", cor="Prata", status="disponivel"),
        Veiculo(id=2, proprietario_id=1, marca="Fiat", modelo="Uno", ano=2015,
                placa="XYZ9K87", status="inativo"),
    ])
    db.commit()
    return {"proprietario_id": 1, "motorista_id": 1, "veiculo_id": 1}


@pytest.fixture
def legal_profiles(db, seed):
    """Dados legais complets pour le motorista 1 et le proprietário 1"""
    db.add(MotoristaLegal(motorista_id=1, **LEGAL_MOTORISTA))
    db.add(ProprietarioLegal(proprietario_id=1, **LEGAL_PROPRIETARIO))
    db.commit()
    return seed


@pytest.fixture
def driver_headers():
    return token_for("motorista", 1)


@pytest.fixture
def other_driver_headers():
    return token_for("motorista", 2)


@pytest.fixture
def owner_headers():
    return token_for("proprietario", 1)


@pytest.fixture
def other_owner_headers():
    return token_for("proprietario", 2)


@pytest.fixture
def admin_headers():
    return token_for("super", 1)


@pytest.fixture
def make_request(client, driver_headers):
    """Crée une solicitação pour le véhicule 1 et retourne son JSON"""
    def _make(data_inicio=date(2025, 1, 1), data_fim=date(2025, 1, 5), headers=None, veiculo_id=1):
        response = client.post(
            "/solicitacoes",
            json={
                "veiculo_id": veiculo_id,
                "data_inicio": data_inicio.isoformat(),
                "data_fim": data_fim.isoformat(),
            },
            headers=headers or driver_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def approved_contract(client, legal_profiles, make_request, owner_headers):
    """Solicitação approuvée: retourne les ids créés"""
    solicitacao = make_request()
    response = client.put(
        f"/solicitacoes/{solicitacao['id']}/aprovar",
        json=APPROVAL_PAYLOAD,
        headers=owner_headers,
    )
    assert response.status_code == 200, response.text
    return response.json()
