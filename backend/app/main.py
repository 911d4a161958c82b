from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.middleware.logging_middleware import RequestContextMiddleware, RequestLoggingMiddleware
from app.routers import router as api_router
from app.service_container import Services
from app.utils.fastapi_utils import install_exception_handlers
from common.core.config_service import Settings
from common.logging import setup_logging
from common.utils.utils import get_logger

logger = get_logger()


def create_app(services: Services | None = None, configure_logging: bool = True) -> FastAPI:
    """Build the application.

    Args:
        services: Pre-built service container. Tests pass one in and manage its
            lifecycle themselves; otherwise one is created and started in the lifespan.
        configure_logging: Install the structlog/stdlib logging configuration
    """
    if configure_logging:
        setup_logging()

    settings = Settings()
    app_services = services or Services()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncGenerator[None, Any]:
        logger.info("Starting application services")
        await app_services.start()

        yield

        logger.info("Application shutting down")
        await app_services.stop()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Paywall checkout and cohort enrollment backed by Stripe",
        version="1.0.0",
        lifespan=lifespan,
    )
    # Available before the lifespan runs, so in-process test clients can reach it
    app.state.services = app_services

    # 1. Request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # 2. CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 3. Outermost: request context shared by every log line of the request
    app.add_middleware(RequestContextMiddleware)

    # Custom exception handlers
    install_exception_handlers(app)

    # Include routers
    app.include_router(api_router)

    return app


if __name__ == "__main__":
    import uvicorn

    from common.core.config_service import ConfigService

    config_service = ConfigService()

    # Get host and port from configuration
    host = config_service.get("host", "0.0.0.0")
    port = config_service.get("port", 8000)

    logger.info(
        "Starting application server",
        host=host,
        port=port,
        environment=config_service.get_environment(),
    )

    uvicorn.run(create_app(Services(config_service)), host=host, port=port)
