"""
FastAPI application factory and configuration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ...application.container import IContainer
from ...application.startup import ApplicationStartup
from ...infrastructure.config.models import ApplicationConfig
from .middleware import ErrorHandlerMiddleware, register_exception_handlers
from .routers import health, upstream

logger = logging.getLogger(__name__)


def create_app(container: IContainer, config: ApplicationConfig,
               startup: Optional[ApplicationStartup] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Container with services already configured
        config: Application configuration
        startup: When given, its components are started and stopped with the app

    Returns:
        Configured FastAPI application
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if startup is not None:
            await startup.start_application()
        try:
            yield
        finally:
            if startup is not None:
                await startup.stop_application()

    app = FastAPI(
        title=config.name,
        version=config.version,
        description="IoT device upstream dispatch-and-publish pipeline",
        debug=config.debug,
        lifespan=lifespan
    )

    app.state.container = container
    app.state.config = config

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(upstream.router)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app
