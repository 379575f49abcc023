"""
Main FastAPI application entry point.

Uses Application Factory Pattern. The schema is migrated inside the
lifespan, before the first request is served.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from monnayeur import __version__
from monnayeur.config.settings import Settings, get_settings
from monnayeur.di import initialize_container, shutdown_container
from monnayeur.domain.exceptions import MonnayeurException
from monnayeur.infrastructure.monitoring import get_logger, setup_logging
from monnayeur.presentation.api.middleware import (
    RequestIDMiddleware,
    monnayeur_exception_handler,
)
from monnayeur.presentation.api.middleware.metrics_middleware import (
    MetricsMiddleware,
)
from monnayeur.presentation.api.routes import callbacks, health, sessions, users
from monnayeur.utils.clock import Clock


def create_app(
    settings: Optional[Settings] = None,
    now_fn: Optional[Clock] = None,
) -> FastAPI:
    """
    Application factory - creates and configures FastAPI app.

    Args:
        settings: Optional Settings instance (for testing)
        now_fn: Optional clock override (for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    # Setup structured logging (JSON only in production)
    json_logs = settings.ENV == "production"
    setup_logging(level=settings.LOG_LEVEL, json_logs=json_logs)
    logger = get_logger(__name__)

    logger.info(f"Creating Monnayeur application (ENV={settings.ENV})")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Monnayeur application...")
        container = await initialize_container(settings=settings, now_fn=now_fn)
        app.state.container = container

        report = container.migration_report
        if report is not None and report.degraded:
            logger.error(
                "Started with a degraded schema migration; "
                "backed-up tables may need manual recovery"
            )

        logger.info("Monnayeur application started successfully")

        yield

        logger.info("Shutting down Monnayeur application...")
        await shutdown_container()
        logger.info("Monnayeur application shutdown complete")

    app = FastAPI(
        title="Monnayeur API",
        description="Identity, eligibility and session store for NFT minting",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware chain (order matters!)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(MonnayeurException, monnayeur_exception_handler)

    # Register routes
    app.include_router(health.router)
    app.include_router(sessions.router, prefix="/api")
    app.include_router(callbacks.router, prefix="/api")
    app.include_router(users.router, prefix="/api")

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint."""
        return {
            "service": settings.APP_NAME,
            "status": "running",
            "version": __version__,
        }

    @app.get("/metrics", tags=["Monitoring"])
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )

    logger.info("Monnayeur application created successfully")
    return app


def get_app() -> FastAPI:
    """
    Get or create application instance.

    For uvicorn: uvicorn monnayeur.main:get_app --factory
    """
    return create_app()


def main():
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "monnayeur.main:get_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )


if __name__ == "__main__":
    main()
