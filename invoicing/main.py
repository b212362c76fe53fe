"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (health, invoices, catalog and, when enabled, error probes)
- Error boundary (classification, error envelope, one log line per failure)
- Request access logging
- Logging configuration

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from invoicing.core.config import Settings
from invoicing.core.config import settings as default_settings
from invoicing.infrastructure.db import create_db_engine, create_schema
from invoicing.interfaces.billing.catalog_router import router as catalog_router
from invoicing.interfaces.billing.router import router as invoices_router
from invoicing.interfaces.diagnostics import router as diagnostics_router
from invoicing.interfaces.health import router as health_router
from invoicing.shared.errors.boundary import ErrorBoundaryMiddleware
from invoicing.shared.errors.handlers import register_error_handlers
from invoicing.shared.logging import configure_logging
from invoicing.shared.request_logging import RequestLoggingMiddleware

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the billing schema on startup when configured to, dispose on exit."""
    settings: Settings = app.state.settings
    if settings.auto_create_schema:
        engine = create_db_engine(settings.require_database_url())
        create_schema(engine)
        app.state.engine = engine

    yield

    if app.state.engine is not None:
        app.state.engine.dispose()


def create_app(
    settings: Optional[Settings] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root of the application.

    Args:
        settings: Configuration to run with. Defaults to the environment.
        logger: Logger the error boundary reports failures to.

    Returns:
        A fully configured FastAPI application instance.
    """
    settings = settings or default_settings
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = None

    # --- Middleware (last added runs first) ---
    app.add_middleware(ErrorBoundaryMiddleware, settings=settings, logger=logger)
    app.add_middleware(RequestLoggingMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(invoices_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    if settings.error_probes_enabled:
        app.include_router(diagnostics_router, prefix=API_PREFIX)

    return app


app = create_app()
