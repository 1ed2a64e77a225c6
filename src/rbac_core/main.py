"""FastAPI application entry point.

The core exposes no business routes of its own. Host applications mount
their routers on the app returned by :func:`create_app` and protect them
with the guards in :mod:`rbac_core.security`.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rbac_core.config import get_settings
from rbac_core.dependencies import get_audit_service
from rbac_core.middleware import RequestIdMiddleware, register_exception_handlers
from rbac_core.services.seed_service import seed_default_rbac
from rbac_core.utils.secure_logging import log_error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    if get_settings().seed_on_startup:
        try:
            await seed_default_rbac()
        except Exception as e:
            log_error(logger, "Failed to seed default RBAC data", e)
            raise
    yield
    # Shutdown: let pending audit deliveries finish
    await get_audit_service().drain()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_settings()
    logging.basicConfig(level=config.log_level)

    app = FastAPI(
        title=config.app_name,
        version="0.1.0",
        description="Role-based access control core",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )

    # Security: Sanitized error handlers to prevent information disclosure
    register_exception_handlers(app)

    app.add_middleware(RequestIdMiddleware)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
