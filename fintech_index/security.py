# fintech_index/security.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from fintech_index import config
from fintech_index.models.user import Role, User

# Clave de sesión del dashboard (login por formulario)
SESSION_USER_KEY = "user"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class TokenClaims:
    id: int
    role: Role
    email: str

    def to_session(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        return data


def _pw_bytes(raw: str) -> bytes:
    # bcrypt solo usa los primeros 72 bytes
    return raw.encode("utf-8")[:72]


def hash_password(raw: str) -> str:
    return bcrypt.hashpw(_pw_bytes(raw), bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(raw: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_bytes(raw), stored.encode("utf-8"))
    except ValueError:
        # hash corrupto o en otro formato
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Devuelve el usuario si puede entrar.
    401 si no existe o la contraseña no coincide, 403 si aún no está verificado
    (se comprueba antes que la contraseña).
    """
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account not verified by admin yet")
    if not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return user


# ==================== TOKENS ====================

def create_access_token(user: User, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "role": user.role,
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(hours=config.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
        return TokenClaims(id=int(payload["id"]), role=Role(payload["role"]), email=str(payload["email"]))
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token")
    return decode_access_token(credentials.credentials)


# ==================== ROLES ====================

def has_role(claims: Optional[TokenClaims], allowed: Iterable[Role]) -> bool:
    # sin jerarquía: admin solo pasa donde aparece explícitamente
    return claims is not None and claims.role in set(allowed)


def require_any_role(*roles: Role):
    def dependency(current_user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
        if not has_role(current_user, roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: insufficient role")
        return current_user
    return dependency


def require_role(role: Role):
    return require_any_role(role)


# ==================== SESIÓN DEL DASHBOARD ====================

def get_session_user(request: Request) -> Optional[TokenClaims]:
    data = request.session.get(SESSION_USER_KEY)
    if not data:
        return None
    try:
        return TokenClaims(id=int(data["id"]), role=Role(data["role"]), email=str(data["email"]))
    except (KeyError, ValueError, TypeError):
        request.session.clear()
        return None
