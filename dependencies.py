"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. State lives on app.state and is populated by
create_app()'s lifespan.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from config import AppSettings
from errors import AuthenticationError
from services.collections import CollectionRegistry
from services.context import RequestContext
from services.tokens import decode_access_token
from shared.i18n import translator_for
from shared.logging import get_logger

log = get_logger(__name__)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_registry(request: Request) -> CollectionRegistry:
    return request.app.state.registry


def get_current_user(request: Request) -> Optional[dict]:
    """Decode the bearer token if one is sent; invalid tokens are rejected.

    Returns the JWT claims, or None for anonymous requests.
    """
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    claims = decode_access_token(token.strip(), get_settings(request).jwt)
    if not claims.get("sub"):
        raise AuthenticationError("Invalid or expired token.")
    return claims


def get_request_context(request: Request) -> RequestContext:
    """Build the per-request context handed to operations and hooks."""
    settings = get_settings(request)
    return RequestContext(
        settings=settings,
        email=request.app.state.email,
        translator=translator_for(
            request.headers.get("accept-language"), settings.default_locale
        ),
        registry=get_registry(request),
        protocol=request.url.scheme,
        host=request.headers.get("host") or request.url.netloc,
        user=get_current_user(request),
    )
