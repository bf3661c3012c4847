"""
Bizledger Web API - FastAPI entry point.

Usage:
    uvicorn bizledger.app:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from bizledger.api.dependencies import build_common_deps
from bizledger.api.errors import error_response, register_exception_handlers
from bizledger.api.routers import (
    ai_router,
    analytics_router,
    banner_router,
    categories_router,
    operations_router,
    system_router,
)
from bizledger.logging_context import clear_correlation_id, set_correlation_id
from bizledger.settings import Settings, get_settings
from bizledger.version import VERSION

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).parent.parent / "web" / "dist"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Services are created by the lifespan on startup."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize services on startup, cleanup on shutdown."""
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.database_path.parent.mkdir(parents=True, exist_ok=True)

        deps = await build_common_deps(settings)
        app.state.deps = deps
        logger.info(f"Database ready at {settings.database_path}")
        if not settings.provider_configured:
            logger.warning("MISTRAL_API_KEY is not set, AI features use local analysis only")

        yield

        await deps.provider.close()
        await deps.db.close()
        logger.info("Database connection closed")

    app = FastAPI(
        title=settings.app_name,
        description="Income and expense tracking with AI-assisted analysis",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Assign a correlation ID to each request."""
        correlation_id = set_correlation_id(request.headers.get("X-Request-ID"))
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = correlation_id
            return response
        finally:
            clear_correlation_id()

    register_exception_handlers(app, is_production=settings.is_production)

    app.include_router(system_router, prefix="/api")
    app.include_router(operations_router, prefix="/api")
    app.include_router(categories_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")
    app.include_router(ai_router, prefix="/api")

    if WEB_DIR.exists():
        _mount_web_ui(app)
    else:
        app.include_router(banner_router)

    return app


def _mount_web_ui(app: FastAPI):
    """Serve the built web client, falling back to index.html for client-side routes."""
    from fastapi.responses import FileResponse, JSONResponse

    if (WEB_DIR / "assets").exists():
        app.mount("/assets", StaticFiles(directory=str(WEB_DIR / "assets")), name="assets")

    @app.get("/{path:path}", include_in_schema=False)
    async def serve_spa(path: str):
        """Serve index.html for all non-API routes (SPA support)."""
        # API paths must return API 404, not SPA HTML.
        if path.startswith("api/") or path == "api":
            return JSONResponse(status_code=404, content=error_response("Route not found"))
        file_path = WEB_DIR / path
        if file_path.exists() and file_path.is_file():
            return FileResponse(file_path)
        return FileResponse(WEB_DIR / "index.html")


app = create_app()
