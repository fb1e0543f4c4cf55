"""
Storage backends and the startup-time backend selection.

create_storage() is the single place a backend is chosen. The application
calls it once in its lifespan and injects the result into every handler;
tests construct MemoryStorage or DatabaseStorage directly.
"""
from visualgenie.config import Settings
from visualgenie.database import build_engine
from visualgenie.storage.base import Storage
from visualgenie.storage.memory import MemoryStorage
from visualgenie.storage.database import DatabaseStorage
from visualgenie.utils.logging_config import storage_logger


def create_storage(settings: Settings) -> Storage:
    """
    Pick the backend from configuration.

    DATABASE_URL absent selects the in-memory backend. DATABASE_URL present
    selects the relational backend and must be a usable connection string.

    Raises:
        StorageConfigurationError: DATABASE_URL is set but blank or malformed
    """
    if settings.DATABASE_URL is None:
        storage_logger.warning("Using in-memory storage (data will be lost on restart)")
        return MemoryStorage()

    engine = build_engine(settings.DATABASE_URL)
    storage_logger.info(f"Using database storage ({engine.url.get_backend_name()})")
    return DatabaseStorage(engine)


__all__ = ["Storage", "MemoryStorage", "DatabaseStorage", "create_storage"]
