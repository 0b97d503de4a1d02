"""Bearer-token authentication.

Voter tokens are minted by the external identity provider with the shared
secret; only the administrator logs in here. The token subject is the user
id recorded on votes.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Literal
from uuid import uuid4

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from prestige.core.config import Settings, get_settings

RoleName = Literal["ADMIN", "VOTER"]

router = APIRouter()
security_scheme = HTTPBearer(auto_error=True)
optional_security_scheme = HTTPBearer(auto_error=False)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenPayload(BaseModel):
    sub: str
    role: RoleName
    type: Literal["access"]
    iat: datetime
    exp: datetime
    jti: str


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    role: RoleName
    token_id: str


def issue_access_token(subject: str, role: RoleName, *, settings: Settings | None = None) -> TokenResponse:
    settings = settings or get_settings()
    now = datetime.now(UTC)
    expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "role": role,
        "type": "access",
        "jti": uuid4().hex,
    }
    encoded = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return TokenResponse(access_token=encoded, expires_in=int(expires_delta.total_seconds()))


def _decode_token(*, token: str, settings: Settings) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        return TokenPayload(**payload)
    except (JWTError, ValidationError) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc


def _to_user(payload: TokenPayload) -> AuthenticatedUser:
    return AuthenticatedUser(user_id=payload.sub, role=payload.role, token_id=payload.jti)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
) -> AuthenticatedUser:
    return _to_user(_decode_token(token=credentials.credentials, settings=get_settings()))


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security_scheme),
) -> AuthenticatedUser | None:
    """Resolve the caller when a bearer token is sent; anonymous callers get ``None``."""

    if credentials is None:
        return None
    return _to_user(_decode_token(token=credentials.credentials, settings=get_settings()))


def require_role(*roles: RoleName) -> Callable[..., AuthenticatedUser]:
    allowed_roles: set[str] = set(roles)

    def dependency(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency


@router.post("/login", response_model=TokenResponse, summary="Issue an administrator access token")
def login(request: LoginRequest) -> TokenResponse:
    settings = get_settings()
    if request.email.lower() != settings.admin_email.lower():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    password_valid = _verify_password(request.password, settings.admin_hashed_password)
    if not password_valid and request.password != settings.admin_password:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return issue_access_token(request.email, "ADMIN", settings=settings)


def _verify_password(raw_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:  # pragma: no cover - invalid hash format
        return False


__all__ = [
    "AuthenticatedUser",
    "RoleName",
    "TokenResponse",
    "get_current_user",
    "get_optional_user",
    "issue_access_token",
    "login",
    "require_role",
    "router",
]
