import logging
import time
from typing import Iterable, NamedTuple, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from . import config
from .errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

# pbkdf2_sha256 avoids bcrypt's 72-byte limit and native backend requirements
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MANAGER_ROLE = "Manager"


class Principal(NamedTuple):
    """Identity and role claims taken from a validated bearer token."""

    subject: str
    email: str
    name: str
    roles: frozenset

    def has_role(self, role: str) -> bool:
        return role in self.roles


def create_access_token(
    user_id: int,
    email: str,
    name: str,
    roles: Iterable[str],
    expires_delta: Optional[int] = None,
) -> str:
    settings = config.get_settings()
    now = int(time.time())
    exp = now + (expires_delta if expires_delta is not None else settings.token_lifetime_seconds)
    payload = {
        "sub": str(user_id),
        "email": email or "",
        "name": name or "",
        "roles": sorted(roles),
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.jwt_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Verify signature, issuer and expiry. Audience is not checked."""
    settings = config.get_settings()
    return jwt.decode(
        token,
        settings.jwt_key,
        algorithms=[settings.jwt_algorithm],
        issuer=settings.jwt_issuer,
        options={"verify_aud": False, "require": ["exp", "iss", "sub"]},
    )


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthorized("missing bearer token")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("token expired")
    except jwt.PyJWTError as e:
        logger.info("rejected bearer token: %s", e)
        raise Unauthorized("invalid token")
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Principal(
        subject=payload["sub"],
        email=payload.get("email", ""),
        name=payload.get("name", ""),
        roles=frozenset(roles),
    )


def require_role(role: str):
    """Build a dependency that admits only principals holding ``role``."""

    def guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_role(role):
            logger.info("principal %s lacks role %s", principal.subject, role)
            raise Forbidden(f"{role} role required")
        return principal

    return guard
