# Overview: Service-layer operations for access/refresh tokens.

"""
JWT Token Service

WHY: Stateless access tokens keep every request to one signature check plus
one user lookup. Refresh tokens are also JWTs but are additionally pinned to
the user record (single active session), so logout and password changes can
invalidate them.

SECURITY FEATURES:
- HS256 signatures with separate secrets for access and refresh tokens
- 15-minute access tokens, 7-day refresh tokens (see Config)
- `type` claim prevents a refresh token being used as an access token
- Random `jti` makes every refresh token value unique, even when two logins
  happen within the same second
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta

import jwt
from flask import current_app

from ..errors import InvalidTokenError
from ..permissions import Role
from ..time_utils import utcnow


ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class AuthContext:
    """
    The acting user for one request.

    Built by the authorization gate and passed explicitly into services.
    """
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def _encode(claims: dict, secret: str, expires_in: timedelta) -> str:
    now = utcnow()
    payload = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + expires_in
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def _decode(token: str, secret: str, expected_type: str) -> dict:
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:  # includes ExpiredSignatureError
        raise InvalidTokenError("Invalid or expired token")

    if claims.get("type") != expected_type or not isinstance(claims.get("id"), int):
        raise InvalidTokenError("Invalid or expired token")
    return claims


def issue_access_token(user, expires_in: timedelta | None = None) -> str:
    """Access token carrying {id, role}."""
    return _encode(
        {"id": user.id, "role": user.role.value, "type": ACCESS},
        current_app.config["ACCESS_TOKEN_SECRET"],
        expires_in or current_app.config["ACCESS_TOKEN_TTL"],
    )


def issue_refresh_token(user, expires_in: timedelta | None = None) -> str:
    """Refresh token carrying {id}; usable only to mint access tokens."""
    return _encode(
        {"id": user.id, "type": REFRESH, "jti": secrets.token_hex(16)},
        current_app.config["REFRESH_TOKEN_SECRET"],
        expires_in or current_app.config["REFRESH_TOKEN_TTL"],
    )


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and type. Raises InvalidTokenError."""
    return _decode(token, current_app.config["ACCESS_TOKEN_SECRET"], ACCESS)


def decode_refresh_token(token: str) -> dict:
    """Verify signature, expiry and type. Raises InvalidTokenError."""
    return _decode(token, current_app.config["REFRESH_TOKEN_SECRET"], REFRESH)
