"""
Principal resolution.

Tokens are issued by the identity service. This service only
checks the signature, reads the caller's identity and flags,
and turns away blacklisted users. Everything downstream trusts
Principal.user_id as-is.
"""

from dataclasses import dataclass

from fastapi import Depends, Header
from jose import JWTError, jwt

from banking_service.api.errors import ApiError
from banking_service.config import Settings, get_settings

BEARER_PREFIX = "Bearer "
MAX_USER_ID_LENGTH = 64


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str = ""
    name: str = ""
    is_admin: bool = False
    is_blacklisted: bool = False


def decode_token(token: str, settings: Settings) -> dict:
    """Verify a token and return its claims. Raises JWTError."""
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE or None,
        options={"verify_aud": bool(settings.JWT_AUDIENCE)},
    )


def get_principal(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """FastAPI dependency: the authenticated caller."""
    if not authorization:
        raise ApiError(
            401, "MISSING_TOKEN", "Authorization header is required"
        )
    if not authorization.startswith(BEARER_PREFIX):
        raise ApiError(
            401,
            "INVALID_TOKEN_FORMAT",
            "Token must be in format: Bearer <token>",
        )

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        claims = decode_token(token, settings)
    except JWTError as e:
        raise ApiError(
            401, "INVALID_TOKEN", "Invalid or expired token", str(e)
        )

    # Identity service puts the id in user_id; fall back to sub
    user_id = claims.get("user_id") or claims.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise ApiError(
            401,
            "INVALID_TOKEN",
            "Invalid or expired token",
            "user_id not found in token",
        )
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise ApiError(
            401, "INVALID_TOKEN", "Invalid or expired token",
            "user_id is too long",
        )

    principal = Principal(
        user_id=user_id,
        email=claims.get("email") or "",
        name=claims.get("name") or "",
        is_admin=claims.get("is_admin") is True,
        is_blacklisted=claims.get("is_blacklisted") is True,
    )

    if principal.is_blacklisted:
        raise ApiError(
            403, "USER_BLACKLISTED", "User account has been suspended"
        )

    return principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise ApiError(403, "ADMIN_REQUIRED", "Admin privileges required")
    return principal
