import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from launchlog.api.routes import admin, auth, user_data
from launchlog.core.config import Settings, settings
from launchlog.core.database import connect_database, create_session_factory
from launchlog.core.errors import register_exception_handlers
from launchlog.core.logging import setup_logging
from launchlog.storage.resilient_store import ResilientStore
from launchlog.storage.sql_store import SqlUserDataStore

logger = logging.getLogger(__name__)


def build_store(config: Settings) -> ResilientStore:
    """
    Pick the backend once, at startup.

    A reachable database gives a durable store mirrored in memory; anything
    else runs on the in-memory mirror alone until the next restart.
    """
    engine = connect_database(config.DATABASE_URL)
    if engine is None:
        return ResilientStore()
    return ResilientStore(durable=SqlUserDataStore(create_session_factory(engine)))


def create_app(store: Optional[ResilientStore] = None) -> FastAPI:
    """
    Build the API.

    Pass a store to skip the startup connection (tests do this); otherwise
    the lifespan hook builds one from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if getattr(app.state, "store", None) is None:
            app.state.store = build_store(settings)
        logger.info(f"LaunchLog API starting in {app.state.store.mode} mode")
        yield
        # Shutdown
        logger.info("LaunchLog API shutting down")

    app = FastAPI(
        title="LaunchLog API",
        description="Focus sessions, kanban board and job applications",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store

    # Without this, browsers block the frontend's requests (same-origin policy)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # All routes are prefixed with /api for consistency
    app.include_router(auth.router, prefix="/api")
    app.include_router(user_data.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    @app.get("/health")
    def health():
        """Liveness check - also reports which backend is serving"""
        current = getattr(app.state, "store", None)
        return {
            "status": "OK",
            "message": "LaunchLog API is running",
            "mode": current.mode if current is not None else "starting",
        }

    return app


setup_logging(settings)
app = create_app()
