from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union
import logging
import os
import secrets

from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from constants import JWT_ALGORITHM, DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES, ERROR_MESSAGES
from enums import PrincipalRole, ADMIN_ROLES
from error_handlers import UnauthorizedError

logger = logging.getLogger(__name__)

# Utilise une variable d'environnement pour la clé secrète
# Si pas définie, génère une clé aléatoire (pour dev seulement)
SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    SECRET_KEY = secrets.token_urlsafe(32)
    logger.warning("JWT_SECRET_KEY não definida, usando chave temporária")

ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES))

# L'émission des jetons (login) est un collaborateur externe
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


# ==================== PRINCIPAUX ====================

@dataclass(frozen=True)
class Principal:
    id: int
    role: str
    nome: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return False

    @property
    def is_driver(self) -> bool:
        return False

    @property
    def is_owner(self) -> bool:
        return False


@dataclass(frozen=True)
class AdminPrincipal(Principal):
    @property
    def is_admin(self) -> bool:
        return True


@dataclass(frozen=True)
class DriverPrincipal(Principal):
    @property
    def is_driver(self) -> bool:
        return True


@dataclass(frozen=True)
class OwnerPrincipal(Principal):
    @property
    def is_owner(self) -> bool:
        return True


AnyPrincipal = Union[AdminPrincipal, DriverPrincipal, OwnerPrincipal]


def resolve_principal(claims: dict) -> AnyPrincipal:
    """
    Résolution unique du principal à partir des claims du jeton.
    Lève UnauthorizedError si l'identifiant ou le rôle est inexploitable.
    """
    user_id = claims.get("id")
    role = claims.get("role")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise UnauthorizedError(ERROR_MESSAGES["invalid_token"])

    fields = {"id": user_id, "role": role, "nome": claims.get("nome"), "email": claims.get("email")}

    if role in ADMIN_ROLES:
        return AdminPrincipal(**fields)
    if role == PrincipalRole.MOTORISTA.value:
        return DriverPrincipal(**fields)
    if role == PrincipalRole.PROPRIETARIO.value:
        return OwnerPrincipal(**fields)

    raise UnauthorizedError(ERROR_MESSAGES["invalid_token"])


# ==================== JETONS ====================

def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError(ERROR_MESSAGES["invalid_token"])


def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> AnyPrincipal:
    if not token:
        raise UnauthorizedError(ERROR_MESSAGES["not_authenticated"])
    return resolve_principal(decode_access_token(token))
