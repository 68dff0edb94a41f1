"""
Authentication service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_exception_handlers, register_middleware
from auth.jwt import TokenService, resolve_jwt_secret
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import build_engine, build_session_factory, init_db

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None, create_schema: bool = True) -> FastAPI:
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_schema:
            await init_db(app.state.engine)
        logger.info("%s ready (environment=%s)", settings.app_name, settings.environment)
        yield
        await app.state.engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Username/password authentication with signed bearer tokens.",
        lifespan=lifespan,
    )

    # Resolved once; a missing secret outside development aborts here.
    app.state.token_service = TokenService(
        resolve_jwt_secret(settings),
        expiry_seconds=settings.jwt_expiry_seconds,
    )
    app.state.password_hasher = PasswordHasher(settings.bcrypt_rounds)

    app.state.engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.session_factory = build_session_factory(app.state.engine)

    if not settings.is_development and app.state.engine.dialect.name == "sqlite":
        logger.warning(
            "ENVIRONMENT=%s but DATABASE_URL points at SQLite; set DATABASE_URL "
            "to the production database.", settings.environment,
        )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth")

    return app


configure_logging(config)
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
