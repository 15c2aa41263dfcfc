"""
Core package containing configuration, database, security, and logging.
"""
from storedash.core.config import settings
from storedash.core.database import Base, init_db, is_db_available
from storedash.core.exceptions import (
    BackendError,
    NotFoundError,
    OrderNotFoundError,
    StoreDashError,
    StoreNotFoundError,
    ValidationError,
)
from storedash.core.logging import configure_logging, get_logger
from storedash.core.security import create_access_token, decode_access_token

__all__ = [
    "settings",
    "Base",
    "init_db",
    "is_db_available",
    "configure_logging",
    "get_logger",
    "create_access_token",
    "decode_access_token",
    "StoreDashError",
    "NotFoundError",
    "OrderNotFoundError",
    "StoreNotFoundError",
    "ValidationError",
    "BackendError",
]
