"""
Main FastAPI application for Signal Radar.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .middleware.metrics import MetricsMiddleware, metrics_endpoint
from .routes import signals
from .services import get_services, initialize_services
from config.settings import get_settings
from signal_scoring.exceptions import ValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Signal Radar starting up...")

    # Initialize database (if configured)
    if settings.database_url:
        try:
            from database.session import init_db
            await init_db(settings.database_url)
        except Exception as e:
            logger.warning(f"Database init failed (running without DB): {e}")

    initialize_services()
    logger.info("Signal Radar ready")
    yield
    logger.info("Signal Radar shutting down...")

    if settings.database_url:
        from database.session import close_db
        await close_db()


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Malformed classifier arguments become 422 responses."""
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "argument": exc.argument, "index": exc.index},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Deterministic intent-signal scoring for reviews, posts and inbound leads.",
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus metrics middleware
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(ValidationError, validation_error_handler)

    app.include_router(signals.router, prefix="/api/v1/signals", tags=["Signals"])

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "service": "Signal Radar",
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
        }

    # Health check
    @app.get("/health")
    async def health():
        services = get_services()
        return {
            "status": "healthy" if services.is_ready else "degraded",
            "services": services.health(),
        }

    # Prometheus metrics endpoint
    app.get("/metrics", tags=["Monitoring"])(metrics_endpoint)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
