"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. FastAPI dependency guards                (get_current_identity, require_admin)

Tokens are stateless: the guards trust the signed claims and never load the
user row, so a request with a missing or bad token is rejected before any
database session is opened.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from core.config import settings
from core.envelope import ApiError, FORBIDDEN, INVALID_TOKEN, UNAUTHORIZED

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256: password hashing
# ---------------------------------------------------------------------------
# Salted and deliberately slow; the round count is the tunable cost factor
# (settings.password_hash_rounds).  passlib embeds salt and rounds in the
# hash string, so older hashes keep verifying after the cost is raised.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plaintext password, returning the full passlib hash string."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    return _pbkdf2.verify(plain, stored_hash)


# ---------------------------------------------------------------------------
# 2.  JWT: access tokens
# ---------------------------------------------------------------------------


class TokenIdentity(BaseModel):
    """Identity decoded from a verified token, attached to the request."""

    user_id: int
    username: str
    email: Optional[str] = None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub (username), user_id, username, role.
    An ``exp`` claim is added automatically.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    return _jwt.encode(to_encode, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises HTTP 403 on any failure (expired,
    bad signature, malformed, missing claims).
    """
    try:
        return _jwt.decode(
            token,
            settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"require": ["exp", "user_id", "username", "role"]},
        )
    except _jwt.ExpiredSignatureError:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Token has expired", code=INVALID_TOKEN)
    except _jwt.InvalidTokenError:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Invalid token", code=INVALID_TOKEN)


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# auto_error=False: a missing header is reported by get_current_identity as 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenIdentity:
    """
    Dependency: verify the bearer token and return the identity it carries.

    Raises 401 when no token was sent and 403 when the token fails
    signature or expiry validation.  The identity is also stored on
    ``request.state.identity`` for middleware and logging.
    """
    if credentials is None or not credentials.credentials:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "Access token required",
            code=UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    try:
        identity = TokenIdentity(
            user_id=payload["user_id"],
            username=payload["username"],
            email=payload.get("email"),
            role=payload["role"],
        )
    except ValueError:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Invalid token", code=INVALID_TOKEN)

    request.state.identity = identity
    return identity


def require_admin(identity: TokenIdentity = Depends(get_current_identity)) -> TokenIdentity:
    """
    Dependency: wraps :func:`get_current_identity` and additionally asserts
    ``role == 'admin'``.  Raises 403 otherwise.
    """
    if not identity.is_admin:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Admin access required", code=FORBIDDEN)
    return identity
