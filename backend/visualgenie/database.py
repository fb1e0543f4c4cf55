from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from visualgenie.config import settings
from visualgenie.exceptions import StorageConfigurationError
from visualgenie.utils.logging_config import database_logger


class Base(DeclarativeBase):
    pass


def normalize_database_url(url: str) -> str:
    """
    Validate a connection string and point plain PostgreSQL URLs at asyncpg.

    Raises:
        StorageConfigurationError: URL is blank or cannot be parsed
    """
    if url is None or not url.strip():
        raise StorageConfigurationError("DATABASE_URL is set but empty")
    url = url.strip()
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://"):]
    elif url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    try:
        make_url(url)
    except ArgumentError as e:
        raise StorageConfigurationError("DATABASE_URL is not a valid connection string") from e
    return url


def build_engine(url: str) -> AsyncEngine:
    """
    Create the async engine for DATABASE_URL.

    Raises:
        StorageConfigurationError: URL is malformed, names an unknown dialect
            or a driver without asyncio support
    """
    url = normalize_database_url(url)
    options = {"echo": settings.DEBUG}
    # SQLite drivers do not take queue pool arguments
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )
    try:
        return create_async_engine(url, **options)
    except (ArgumentError, InvalidRequestError) as e:
        # NoSuchModuleError (unknown dialect) is an ArgumentError
        database_logger.error(f"Cannot create database engine: {type(e).__name__}")
        raise StorageConfigurationError("DATABASE_URL does not name a usable async database driver") from e


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    # Register the tables on Base.metadata
    from visualgenie.models import User, Project, Diagram  # noqa: F401

    database_logger.info("Initializing database...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    database_logger.success("Database schema created/updated")


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
