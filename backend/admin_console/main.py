"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from admin_console.config import get_settings
from admin_console.api.v1 import router as api_v1_router
from admin_console.routes.auth import router as auth_router
from admin_console.services.console import Console, build_console

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app(console: Console | None = None) -> FastAPI:
    """Build the application; tests pass a console wired to fakes."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        logger.info("Starting %s...", settings.app_name)
        app.state.console = console or build_console(settings)
        yield
        logger.info("Shutting down...")
        await app.state.console.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Moderation console for marketplace users, jobs and bookings",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(api_v1_router)
    app.include_router(auth_router)

    @app.get("/health")
    async def health_check():
        state = app.state.console.state
        return {
            "status": "degraded" if state.last_error else "healthy",
            "app": settings.app_name,
            "authenticated": app.state.console.gate.is_authenticated,
            "snapshot_taken_at": state.snapshot.taken_at.isoformat() if state.snapshot else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()
