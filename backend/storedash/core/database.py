"""
Database connection management with SQLAlchemy async.

The database is optional - without DATABASE_URL, or when the connection
fails at startup, the application runs in demo mode on the in-memory
document store.
"""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from storedash.core.config import settings
from storedash.core.logging import get_logger

logger = get_logger(__name__)

# Flag to track if database is available
_db_available: bool = False

engine: Optional[AsyncEngine] = None
async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


def create_engine(database_url: str) -> AsyncEngine:
    """Create async database engine with proper configuration."""
    # Convert postgresql:// to postgresql+asyncpg://
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=settings.database_echo)

    return create_async_engine(
        database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Context manager for a session that commits on success."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> bool:
    """
    Initialize database tables.

    Returns True when the database is usable. Connection failures are
    logged and leave the application in demo mode.
    """
    global _db_available, engine, async_session_factory

    if not settings.database_url:
        logger.info("DATABASE_URL not set - running in demo mode")
        _db_available = False
        return False

    # Register document table on the metadata
    from storedash.models import document  # noqa: F401

    try:
        engine = create_engine(settings.database_url)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async_session_factory = create_session_factory(engine)
        _db_available = True
        logger.info("Database initialized")
    except Exception as e:
        _db_available = False
        logger.warning(
            "Database connection failed - running in demo mode",
            error=str(e),
        )
    return _db_available


def is_db_available() -> bool:
    """Check if database is available."""
    return _db_available


async def close_db() -> None:
    """Close database connections."""
    global _db_available
    if _db_available and engine is not None:
        await engine.dispose()
        _db_available = False
        logger.info("Database connections closed")
    else:
        logger.info("No database connections to close (demo mode)")
