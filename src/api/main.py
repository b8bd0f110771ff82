import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.api.deps import get_settings
from src.api.errors import register_error_handlers
from src.api.routes import auth, dashboard, profile
from src.api.routes.records import include_record_routers
from src.app_shell.config import (
    Settings,
    build_session_store,
    build_storage,
    configure_logging,
    load_app_rules,
)
from src.components.auth.ports import SessionStorePort
from src.ports.clock import ClockPort
from src.ports.repo import StoragePort
from src.rules.models import Rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    app.state.storage.initialize()
    yield


def create_app(
    settings: Settings | None = None,
    rules: Rules | None = None,
    storage: StoragePort | None = None,
    session_store: SessionStorePort | None = None,
    clock: ClockPort | None = None,
) -> FastAPI:
    """
    Build the API.

    Every collaborator can be passed in; whatever is missing is derived from
    settings (environment) and the rules file. Invalid rules raise here, so a
    misconfigured process never starts serving.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings)

    if rules is None:
        rules = load_app_rules(settings)
    if clock is None:
        clock = SystemClock()
    if storage is None:
        storage = build_storage(settings, rules, clock)
    if session_store is None:
        session_store = build_session_store(storage)

    app = FastAPI(
        title="BizManager API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.rules = rules
    app.state.storage = storage
    app.state.session_store = session_store
    app.state.clock = clock
    app.state.auth_adapter = JWTAuthAdapter(secret_key=settings.secret_key)

    register_error_handlers(app)

    # --- Routers ---
    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(profile.router, prefix="/api", tags=["Profile"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
    include_record_routers(app)

    # CORS (Allow Frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=rules.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    logger.info("API built with %s storage", settings.storage)
    return app
