"""
Compteur de la cloche et bascule des drapeaux de lecture
"""
from sqlalchemy.exc import OperationalError

from services.notification_service import BadgeService

from conftest import APPROVAL_PAYLOAD


def _count(client, headers):
    response = client.get("/notificacoes/contador", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["total_nao_lidas"]


class TestBadgeCounter:

    def test_requires_authentication(self, client, seed):
        assert client.get("/notificacoes/contador").status_code == 401

    def test_full_scenario(self, client, legal_profiles, make_request, owner_headers, driver_headers):
        assert _count(client, owner_headers) == 0
        assert _count(client, driver_headers) == 0

        solicitacao = make_request()
        assert _count(client, owner_headers) == 1
        assert _count(client, driver_headers) == 0

        client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/proprietario", headers=owner_headers)
        assert _count(client, owner_headers) == 0

        aprovacao = client.put(
            f"/solicitacoes/{solicitacao['id']}/aprovar", json=APPROVAL_PAYLOAD, headers=owner_headers
        ).json()
        assert _count(client, driver_headers) == 1
        assert _count(client, owner_headers) == 0

        contrato_id = aprovacao["contrato_id"]
        client.post(f"/contratos/{contrato_id}/publicar", headers=owner_headers)
        assert _count(client, driver_headers) == 2

        client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/motorista", headers=driver_headers)
        client.patch(f"/contratos/{contrato_id}/mark-read/motorista", headers=driver_headers)
        assert _count(client, driver_headers) == 0

        client.post(f"/contratos/{contrato_id}/assinar", headers=driver_headers)
        assert _count(client, owner_headers) == 1
        assert _count(client, driver_headers) == 0

    def test_refusal_notifies_driver(self, client, seed, make_request, owner_headers, driver_headers):
        solicitacao = make_request()
        client.put(f"/solicitacoes/{solicitacao['id']}/recusar", json={"motivo": "Indisponível"}, headers=owner_headers)
        assert _count(client, driver_headers) == 1
        assert _count(client, owner_headers) == 0

    def test_counts_only_own_vehicles(self, client, seed, make_request, other_owner_headers, other_driver_headers):
        make_request()
        assert _count(client, other_owner_headers) == 0
        assert _count(client, other_driver_headers) == 0

    def test_store_failure(self, client, seed, driver_headers, monkeypatch):
        def _broken(db, principal):
            raise OperationalError("SELECT count(*)", {}, Exception("database is down"))

        monkeypatch.setattr(BadgeService, "get_unread_count", staticmethod(_broken))
        response = client.get("/notificacoes/contador", headers=driver_headers)
        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "internal_error"}


class TestMarkRead:

    def test_mark_read_is_idempotent(self, client, seed, make_request, owner_headers):
        solicitacao = make_request()
        url = f"/solicitacoes/{solicitacao['id']}/mark-read/proprietario"
        for _ in range(2):
            response = client.patch(url, headers=owner_headers)
            assert response.status_code == 200
            assert response.json() == {"ok": True, "id": solicitacao["id"], "visto_por": "proprietario"}

    def test_mark_read_does_not_touch_other_party(self, client, seed, make_request, owner_headers, driver_headers):
        solicitacao = make_request()
        client.put(f"/solicitacoes/{solicitacao['id']}/recusar", json={}, headers=owner_headers)
        client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/motorista", headers=driver_headers)

        body = client.get(f"/solicitacoes/{solicitacao['id']}", headers=driver_headers).json()
        assert body["visto_por_motorista"] == 1
        assert body["visto_por_proprietario"] == 1

    def test_parties_cannot_clear_each_other(self, client, seed, make_request, owner_headers, driver_headers):
        solicitacao = make_request()
        base = f"/solicitacoes/{solicitacao['id']}/mark-read"
        assert client.patch(f"{base}/motorista", headers=owner_headers).status_code == 403
        assert client.patch(f"{base}/proprietario", headers=driver_headers).status_code == 403

    def test_admin_cannot_clear_owner_flag(self, client, seed, make_request, admin_headers):
        solicitacao = make_request()
        response = client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/proprietario", headers=admin_headers)
        assert response.status_code == 403

    def test_unknown_party(self, client, seed, make_request, owner_headers):
        solicitacao = make_request()
        response = client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/admin", headers=owner_headers)
        assert response.status_code == 400

    def test_contract_mark_read(self, client, approved_contract, owner_headers, other_driver_headers):
        contrato_id = approved_contract["contrato_id"]
        response = client.patch(f"/contratos/{contrato_id}/mark-read/proprietario", headers=owner_headers)
        assert response.status_code == 200
        assert client.patch(f"/contratos/{contrato_id}/mark-read/motorista", headers=other_driver_headers).status_code == 403

    def test_unread_filters(self, client, seed, make_request, owner_headers):
        solicitacao = make_request()
        nao_lidas = client.get("/solicitacoes/recebidas", params={"unread": 1}, headers=owner_headers).json()
        assert [s["id"] for s in nao_lidas] == [solicitacao["id"]]

        client.patch(f"/solicitacoes/{solicitacao['id']}/mark-read/proprietario", headers=owner_headers)
        assert client.get("/solicitacoes/recebidas", params={"unread": 1}, headers=owner_headers).json() == []
        assert len(client.get("/solicitacoes/recebidas", headers=owner_headers).json()) == 1

    def test_contract_unread_filter(self, client, approved_contract, owner_headers, driver_headers):
        contrato_id = approved_contract["contrato_id"]
        assert client.get("/contratos/minhas", params={"unread": 1}, headers=driver_headers).json() == []
        client.post(f"/contratos/{contrato_id}/publicar", headers=owner_headers)
        nao_lidos = client.get("/contratos/minhas", params={"unread": 1}, headers=driver_headers).json()
        assert [c["id"] for c in nao_lidos] == [contrato_id]
