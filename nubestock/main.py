"""
Main FastAPI application.

This is the entry point for the API server:
    uvicorn nubestock.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from nubestock.core.config import settings
from nubestock.core.logging import configure_logging
from nubestock.db.session import build_engine, build_session_maker
from nubestock.errors import (
    AppError,
    app_error_handler,
    request_validation_error_handler,
    unhandled_error_handler,
)
from nubestock.routers import alerts, clients, health, materials, products

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    - On startup: configure logging, create the engine and session factory.
    - On shutdown: dispose of the engine and its pooled connections.
    """
    configure_logging(settings.LOG_LEVEL)
    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_maker = build_session_maker(engine)
    logger.info("Starting %s...", settings.APP_NAME)

    yield  # The server runs while we're "yielded" here

    logger.info("Shutting down %s...", settings.APP_NAME)
    await engine.dispose()


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Inventory backend for Nubestock: products, materials, clients and stock alerts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(products.router)
app.include_router(materials.router)
app.include_router(clients.router)
app.include_router(alerts.router)
