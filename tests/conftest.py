"""
Shared fixtures.

Operations talk to pymongo's async API; tests back it with mongomock through
the awaitable facade in tests/helpers.py, so no MongoDB server is needed.
"""

from __future__ import annotations

from typing import Any

import pytest

from config import AppSettings
from infrastructure.email.dispatcher import EmailDispatcher
from operations.args import OperationArgs
from schemas.collection import AuthOptions, CollectionConfig
from services.collections import Collection, CollectionRegistry
from services.context import RequestContext
from shared.i18n import Translator
from tests.helpers import AsyncMongomockDatabase, RecordingEmailProvider, make_settings


# ── fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def db() -> AsyncMongomockDatabase:
    return AsyncMongomockDatabase()


@pytest.fixture
def email_provider() -> RecordingEmailProvider:
    return RecordingEmailProvider()


@pytest.fixture
def dispatcher(email_provider) -> EmailDispatcher:
    return EmailDispatcher(email_provider, await_delivery=True)


@pytest.fixture
def users_config() -> CollectionConfig:
    return CollectionConfig(slug="users", auth=AuthOptions())


@pytest.fixture
def posts_config() -> CollectionConfig:
    return CollectionConfig(slug="posts")


@pytest.fixture
def registry(db, users_config, posts_config) -> CollectionRegistry:
    return CollectionRegistry.from_configs(db, [users_config, posts_config])


@pytest.fixture
def ctx(settings, dispatcher, registry) -> RequestContext:
    return RequestContext(
        settings=settings,
        email=dispatcher,
        translator=Translator("en"),
        registry=registry,
        host="localhost:8000",
    )


@pytest.fixture
def users(registry) -> Collection:
    return registry.get("users")


@pytest.fixture
def posts(registry) -> Collection:
    return registry.get("posts")


@pytest.fixture
def make_args(ctx):
    def _make(collection: Collection, **kwargs: Any) -> OperationArgs:
        return OperationArgs(collection=collection, req=ctx, **kwargs)

    return _make
