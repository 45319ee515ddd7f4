"""
Database connection and session management for SQLAlchemy 2.0.
Configured for async operations with PostgreSQL, falling back to SQLite.
"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from urllib.parse import urlparse
import logging

from app.config import settings

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


def _async_database_url(url: str) -> str:
    """Map a plain postgresql:// URL onto the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


_engine_args = {
    "echo": False,  # Set to True for SQL query logging in development
}

# Pool settings only apply to PostgreSQL (not SQLite)
if settings.DATABASE_URL and settings.DATABASE_URL.startswith("postgresql"):
    _engine_args.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "application_name": "latent-library-admin"
            }
        }
    })

engine = create_async_engine(
    _async_database_url(settings.DATABASE_URL) if settings.DATABASE_URL else "sqlite+aiosqlite:///:memory:",
    **_engine_args
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    FastAPI dependency for database sessions.
    Rolls back on error; mutations commit explicitly inside the services.

    Usage:
        @app.get("/endpoint")
        async def my_endpoint(db: AsyncSession = Depends(get_db)):
            pass
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {str(e)}")
            raise
        finally:
            await session.close()


def _validate_database_url(url: str) -> tuple[bool, str]:
    """
    Validate database URL and provide diagnostic information.
    Returns (is_valid, diagnostic_message)
    """
    if not url:
        return False, "DATABASE_URL is empty"

    try:
        parsed = urlparse(url)
    except ValueError as e:
        return False, f"Error parsing DATABASE_URL: {str(e)}"

    if not url.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
        return False, f"Invalid database URL scheme: {parsed.scheme}"

    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        return False, "No hostname found in DATABASE_URL"

    return True, f"URL format valid. Scheme: {parsed.scheme}, Host: {parsed.hostname or 'local'}"


async def init_db():
    """
    Initialize database connection.
    Creates the schema when running against the SQLite fallback, since
    Alembic migrations only target PostgreSQL deployments.
    """
    if not settings.DATABASE_URL:
        logger.warning("DATABASE_URL not set, using in-memory SQLite database")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        return

    is_valid, diagnostic = _validate_database_url(settings.DATABASE_URL)
    if not is_valid:
        logger.error(f"Invalid DATABASE_URL: {diagnostic}")
        raise ValueError(f"Invalid DATABASE_URL: {diagnostic}")

    logger.info(f"Database URL validation: {diagnostic}")

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        logger.info("Database connection initialized successfully")


async def close_db():
    """
    Close database connections.
    Can be used for shutdown events.
    """
    await engine.dispose()
    logger.info("Database connections closed")
