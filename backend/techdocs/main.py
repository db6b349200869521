"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techdocs.config import get_settings
from techdocs.infrastructure.container import ServiceContainer
from techdocs.infrastructure.logging.log_config import setup_logging
from techdocs.presentation.api.error_handlers import register_error_handlers
from techdocs.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — open the service container, close it on shutdown."""
    setup_logging()

    container = ServiceContainer(get_settings())
    await container.open()
    app.state.container = container

    yield

    # Shutdown
    await container.close()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "techdocs.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
