"""
Marketplace Gateway Application Factory
=======================================

Entry point for the gateway that sits between the marketplace frontend
and the backend API.

Architecture:
    Browser → Gateway (this service) → Backend API
                                     → Image host (Cloudinary)

Routers:
    - /api/*            : Forwarding routes generated from the route table
    - /api/auth/*       : Reset-token check and verification codes
    - /api/upload/*     : Image, document and profile-picture uploads
    - /uploads/documents: Locally stored documents
    - /health           : Health check endpoint

Environment Variables Required:
    - BACKEND_API_URL (or NEXT_PUBLIC_API_URL): Backend base URL
    - JWT_SECRET: Secret the backend signs tokens with (min 32 chars)
    - CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET
    - LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn gateway.app.main:create_app --factory --reload --port 3000

    Production:
        uvicorn gateway.app.main:create_app --factory --host 0.0.0.0 --port 3000 --workers 4
"""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .auth import auth_router
from .config import Settings, get_settings, validate_configuration
from .errors import register_error_handlers
from .proxy import proxy_router
from .uploads import uploads_router
from .verification import LoggingCodeSender, VerificationStore, run_cleanup, verification_router

SERVICE_NAME = "marketplace-gateway"
SERVICE_VERSION = "1.0.0"


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Configure logging and report configuration problems
        - Create the backend and image-host HTTP clients
        - Create the verification store and start its cleanup task

    Shutdown:
        - Cancel the cleanup task
        - Close both HTTP clients
    """
    settings: Settings = app.state.settings

    setup_logging(settings.LOG_LEVEL)
    logger = logging.getLogger("gateway.main")

    report = validate_configuration(settings)
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")

    logger.info(
        "Starting gateway service",
        extra={"backend_url": report["backend_url"], "log_level": settings.LOG_LEVEL},
    )

    Path(settings.UPLOADS_DIR).mkdir(parents=True, exist_ok=True)

    app.state.backend_client = httpx.AsyncClient(base_url=settings.backend_api_url_str)
    app.state.storage_client = httpx.AsyncClient()

    app.state.verification_store = VerificationStore(
        ttl_minutes=settings.VERIFICATION_CODE_TTL_MINUTES,
        max_attempts=settings.VERIFICATION_MAX_ATTEMPTS,
    )
    if getattr(app.state, "code_sender", None) is None:
        app.state.code_sender = LoggingCodeSender()

    cleanup_task = asyncio.create_task(
        run_cleanup(app.state.verification_store, settings.VERIFICATION_CLEANUP_SECONDS)
    )
    logger.info("Gateway service started", extra={"version": SERVICE_VERSION})

    yield

    logger.info("Shutting down gateway service")

    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task

    await app.state.backend_client.aclose()
    await app.state.storage_client.aclose()
    app.state.backend_client = None
    app.state.storage_client = None

    logger.info("Gateway service shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Explicit settings; read from the environment when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Marketplace Gateway",
        description="API gateway for the service marketplace frontend",
        version=SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    origins = settings.allowed_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
        )

    register_error_handlers(app)

    # Local routes are registered before the generic /api table
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(verification_router, prefix="/api/auth")
    app.include_router(uploads_router, prefix="/api/upload")
    app.include_router(proxy_router, prefix="/api")

    app.mount(
        settings.UPLOADS_URL_PREFIX.rstrip("/"),
        StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
        name="documents",
    )

    @app.get("/health", tags=["System"])
    async def health_check() -> Dict[str, str]:
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        }

    @app.get("/", tags=["System"])
    async def root() -> Dict[str, Any]:
        """Service metadata and available endpoints."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "description": "API gateway for the service marketplace frontend",
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "api": "/api",
                "auth": "/api/auth",
                "upload": "/api/upload",
            },
        }

    return app


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "gateway.app.main:create_app",
        factory=True,
        host=settings.GATEWAY_HOST,
        port=settings.GATEWAY_PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
