"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.dispatcher import build_email_dispatcher
from infrastructure.http_client import HttpClient
from routes.collection_routes import build_collection_router
from routes.health_routes import router as health_router
from schemas.collection import AuthOptions, CollectionConfig
from services.collections import CollectionRegistry
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def default_collections() -> list[CollectionConfig]:
    """A single auth-enabled ``users`` collection."""
    return [CollectionConfig(slug="users", auth=AuthOptions())]


def register_routes(
    app: FastAPI, settings: AppSettings, collections: Iterable[CollectionConfig]
) -> None:
    app.include_router(health_router)
    for config in collections:
        app.include_router(build_collection_router(config, settings))


def create_app(
    settings: Optional[AppSettings] = None,
    collections: Optional[list[CollectionConfig]] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()
    if collections is None:
        collections = default_collections()

    setup_logging(settings.logging.log_level, settings.logging.log_format)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        db = mongo_client[settings.db.db_name]
        http_client = HttpClient()

        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings
        app.state.registry = CollectionRegistry.from_configs(db, collections)
        app.state.email = build_email_dispatcher(settings.email, http_client)

        await app.state.registry.ensure_indexes()
        log.info("app_started", collections=len(app.state.registry), env=settings.env)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await app.state.email.drain()
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app, settings, collections)

    return app
