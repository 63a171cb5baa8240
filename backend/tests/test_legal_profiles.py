"""
Endpoints des dados legais de la partie connectée
"""
from models import AuditLog

from conftest import LEGAL_MOTORISTA, LEGAL_PROPRIETARIO


class TestLegalProfileEndpoints:

    def test_empty_profile(self, client, seed, driver_headers):
        response = client.get("/motoristas/me/dados-legais", headers=driver_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["completo"] is False
        assert len(body["campos_faltantes"]) == 12
        assert body["rg"] is None

    def test_partial_upsert(self, client, seed, driver_headers):
        response = client.put(
            "/motoristas/me/dados-legais",
            json={"rg": "12.345.678-9", "uf_rg": "sp", "endereco_cep": "01001000"},
            headers=driver_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["uf_rg"] == "SP"
        assert body["endereco_cep"] == "01001-000"
        assert "rg" not in body["campos_faltantes"]
        assert len(body["campos_faltantes"]) == 9

    def test_blank_values_keep_existing(self, client, seed, driver_headers):
        client.put("/motoristas/me/dados-legais", json={"rg": "12.345.678-9"}, headers=driver_headers)
        response = client.put(
            "/motoristas/me/dados-legais",
            json={"rg": "  ", "profissao": "motorista"},
            headers=driver_headers,
        )
        body = response.json()
        assert body["rg"] == "12.345.678-9"
        assert body["profissao"] == "motorista"

    def test_complete_owner_profile(self, client, seed, owner_headers, db):
        response = client.put("/proprietarios/me/dados-legais", json=LEGAL_PROPRIETARIO, headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["completo"] is True
        assert response.json()["campos_faltantes"] == []

        log = db.query(AuditLog).filter(AuditLog.entity_type == "DADOS_LEGAIS").one()
        assert log.action == "UPSERT"
        assert log.user_role == "proprietario"

    def test_existing_profile_is_reported(self, client, legal_profiles, driver_headers):
        body = client.get("/motoristas/me/dados-legais", headers=driver_headers).json()
        assert body["completo"] is True
        assert body["endereco_cidade"] == LEGAL_MOTORISTA["endereco_cidade"]

    def test_side_is_enforced(self, client, seed, owner_headers, driver_headers):
        assert client.get("/motoristas/me/dados-legais", headers=owner_headers).status_code == 403
        assert client.put("/proprietarios/me/dados-legais", json={"rg": "1"}, headers=driver_headers).status_code == 403

    def test_invalid_values(self, client, seed, driver_headers):
        for payload in ({"uf_rg": "XX"}, {"endereco_cep": "123"}, {"estado_civil": "noivo"}):
            response = client.put("/motoristas/me/dados-legais", json=payload, headers=driver_headers)
            assert response.status_code == 400, payload

    def test_nothing_to_update(self, client, seed, driver_headers):
        response = client.put("/motoristas/me/dados-legais", json={"rg": ""}, headers=driver_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Nada para atualizar"
