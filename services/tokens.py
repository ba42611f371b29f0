"""
JWT access tokens for auth-enabled collections (HS256 via PyJWT).
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

import jwt

from config import JWTSettings
from errors import AuthenticationError
from shared.datetime_utils import utc_now

_ALGORITHM = "HS256"


def _secret(settings: JWTSettings) -> str:
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set to issue or verify tokens")
    return settings.jwt_secret


def issue_access_token(
    user: dict[str, Any],
    collection_slug: str,
    settings: JWTSettings,
    ttl_seconds: Optional[int] = None,
) -> tuple[str, int]:
    """Return ``(token, exp)`` for the user JSON (needs ``id`` and ``email``)."""
    now = utc_now()
    exp = int((now + timedelta(seconds=ttl_seconds or settings.access_token_ttl_seconds)).timestamp())
    claims = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "sub": str(user["id"]),
        "email": user.get("email"),
        "collection": collection_slug,
        "iat": int(now.timestamp()),
        "exp": exp,
    }
    return jwt.encode(claims, _secret(settings), algorithm=_ALGORITHM), exp


def decode_access_token(token: str, settings: JWTSettings) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            _secret(settings),
            algorithms=[_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.PyJWTError as e:
        raise AuthenticationError("Invalid or expired token.") from e
