"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from audio_clipper import __version__
from audio_clipper.api.errors import register_exception_handlers
from audio_clipper.api.routes import downloads, health, jobs, remote_storage, sources, websocket
from audio_clipper.config import settings
from audio_clipper.logging import get_logger, setup_logging
from audio_clipper.services.container import ServiceContainer, build_services

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    services: ServiceContainer | None = getattr(app.state, "services", None)
    if services is None:
        services = build_services(settings)
        app.state.services = services

    if not await services.repository.health_check():
        # Don't raise - let health checks report the issue
        logger.error("repository_unavailable")

    services.sweeper.start()

    yield

    # Shutdown
    logger.info("application_shutting_down")
    await services.shutdown()


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Create the application, optionally around a prebuilt service container."""
    app = FastAPI(
        title="Audio Clipper",
        description="Cut named audio clips out of remote or uploaded sources",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(sources.router, prefix="/api/v1")
    app.include_router(jobs.router, prefix="/api/v1")
    app.include_router(downloads.router, prefix="/api/v1")
    app.include_router(remote_storage.router, prefix="/api/v1")
    app.include_router(websocket.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint redirect to docs."""
        return {
            "name": "Audio Clipper",
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "audio_clipper.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
