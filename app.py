"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.verification import (
    InMemoryVerificationStore,
    RedisVerificationStore,
    VerificationStore,
)
from repositories.user_repository import UserRepository
from routes.email_routes import router as email_router
from routes.health_routes import router as health_router
from services.verification_service import EmailVerificationService
from shared.logging import get_logger, setup_logging
from workers.verification_sweeper import VerificationSweeper

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

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
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        # Redis is optional; without it the ledger lives in process memory
        redis_client = None
        store: VerificationStore
        if settings.redis.redis_uri:
            redis_client = aioredis.from_url(
                settings.redis.redis_uri,
                encoding="utf-8",
                decode_responses=True,
            )
            store = RedisVerificationStore(redis_client)
        else:
            store = InMemoryVerificationStore()
        app.state.redis = redis_client

        email_http = HttpClient(timeout=settings.email.email_timeout_seconds)
        email_provider = ZeptoMailProvider(
            settings.email,
            email_http,
            verification=settings.verification,
            app_name=settings.app_name,
            app_url=settings.app_url,
        )

        service = EmailVerificationService(
            store=store,
            users=UserRepository(app.state.db[settings.db.users_collection]),
            email_provider=email_provider,
            settings=settings.verification,
        )
        app.state.verification_service = service

        sweeper = VerificationSweeper(
            service, interval_seconds=settings.verification.sweep_interval_seconds
        )
        sweeper.start()
        app.state.verification_sweeper = sweeper

        log.info(
            "app_started",
            ledger_backend=type(store).__name__,
            env=settings.env,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await sweeper.stop()
        await email_http.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        log.info("app_stopped")

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
    app.include_router(health_router)
    app.include_router(email_router)

    return app
