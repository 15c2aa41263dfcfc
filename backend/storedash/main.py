"""
StoreDash API - Main Application Entry Point.

Store owners pick one of their stores and manage its orders, products,
collections and settings.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storedash.core import database
from storedash.core.config import settings
from storedash.core.logging import configure_logging, get_logger
from storedash.core.timestamps import MonotonicClock
from storedash.middleware import ErrorHandlerMiddleware, RequestIdMiddleware
from storedash.repositories import DocumentStore, MemoryDocumentStore, SqlDocumentStore
from storedash.routers import (
    collections_router,
    health_router,
    orders_router,
    products_router,
    stores_router,
)
from storedash.services.demo_data import seed_demo_data

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)


async def create_document_store() -> DocumentStore:
    """SQL-backed store when the database is reachable, demo store otherwise."""
    if await database.init_db():
        return SqlDocumentStore(database.async_session_factory)

    store = MemoryDocumentStore()
    if settings.seed_demo_data:
        await seed_demo_data(store)
    return store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    app.state.document_store = await create_document_store()

    # Initialize Sentry if configured
    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized")

    yield

    logger.info("Shutting down application")
    await app.state.document_store.close()
    await database.close_db()


def create_app() -> FastAPI:
    """
    Application factory function.
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Store management dashboard API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.write_clock = MonotonicClock()

    # Add middleware (order matters - last added = outermost)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
        ],
    )

    app.include_router(health_router)
    app.include_router(stores_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(products_router, prefix="/api")
    app.include_router(collections_router, prefix="/api")

    logger.info(
        "Application created",
        routes=len(app.routes),
        cors_origins=len(settings.allowed_origins),
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storedash.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
