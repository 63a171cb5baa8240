"""
Tests unitaires: résolution du principal et contrôle de propriété des véhicules
"""
import pytest
from jose import jwt

from auth import (
    AdminPrincipal, DriverPrincipal, OwnerPrincipal,
    create_access_token, decode_access_token, resolve_principal
)
from error_handlers import ForbiddenError, NotFoundError, UnauthorizedError
from models import Veiculo
from permission_service import assert_owner_or_admin, assert_is_specific_owner


class TestResolvePrincipal:

    @pytest.mark.parametrize("role", ["admin", "comum", "super"])
    def test_admin_roles(self, role):
        principal = resolve_principal({"id": 3, "role": role})
        assert isinstance(principal, AdminPrincipal)
        assert principal.is_admin and not principal.is_owner

    def test_driver(self):
        principal = resolve_principal({"id": "7", "role": "motorista", "nome": "Carlos"})
        assert isinstance(principal, DriverPrincipal)
        assert principal.id == 7
        assert principal.nome == "Carlos"

    def test_owner(self):
        assert isinstance(resolve_principal({"id": 1, "role": "proprietario"}), OwnerPrincipal)

    @pytest.mark.parametrize("claims", [
        {"id": 1, "role": "visitante"},
        {"id": None, "role": "motorista"},
        {"id": "abc", "role": "motorista"},
        {"role": "admin"},
    ])
    def test_unusable_claims(self, claims):
        with pytest.raises(UnauthorizedError):
            resolve_principal(claims)

    def test_token_round_trip(self):
        token = create_access_token({"id": 5, "role": "proprietario"})
        assert resolve_principal(decode_access_token(token)) == OwnerPrincipal(id=5, role="proprietario")

    def test_token_signed_with_other_key(self):
        token = jwt.encode({"id": 5, "role": "proprietario"}, "outra-chave", algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            decode_access_token(token)


class TestOwnershipGuard:

    def test_owner_passes(self, db, seed):
        assert assert_owner_or_admin(db, OwnerPrincipal(id=1, role="proprietario"), 1) is None

    def test_admin_passes_for_any_vehicle(self, db, seed):
        assert_owner_or_admin(db, AdminPrincipal(id=1, role="comum"), 1)

    def test_other_owner_is_forbidden(self, db, seed):
        with pytest.raises(ForbiddenError):
            assert_owner_or_admin(db, OwnerPrincipal(id=2, role="proprietario"), 1)

    def test_driver_is_forbidden(self, db, seed):
        with pytest.raises(ForbiddenError):
            assert_owner_or_admin(db, DriverPrincipal(id=1, role="motorista"), 1)

    def test_missing_vehicle(self, db, seed):
        with pytest.raises(NotFoundError):
            assert_owner_or_admin(db, AdminPrincipal(id=1, role="admin"), 999)

    def test_vehicle_without_owner(self, db, seed):
        db.add(Veiculo(id=3, proprietario_id=None, marca="VW", modelo="Gol", placa="GOL0A00"))
        db.commit()
        with pytest.raises(NotFoundError):
            assert_owner_or_admin(db, AdminPrincipal(id=1, role="admin"), 3)

    def test_specific_owner_excludes_admin(self, db, seed):
        assert_is_specific_owner(db, OwnerPrincipal(id=1, role="proprietario"), 1)
        with pytest.raises(ForbiddenError):
            assert_is_specific_owner(db, AdminPrincipal(id=1, role="admin"), 1)
