import os
import sys
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import BigInteger, Integer, MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from monopoly_web.core.config import get_settings

settings = get_settings()

# Check if we're in production
IS_PRODUCTION = os.environ.get("APP_ENVIRONMENT") == "production"

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./monopoly.db"


def process_database_url(url):
    """Normalize a database URL to one of the async drivers we ship with."""
    if not url:
        # In production, never fall back to SQLite
        if IS_PRODUCTION:
            logger.error("No database URL provided in production environment!")
            sys.exit(1)
        logger.warning("No database URL provided, falling back to SQLite")
        return SQLITE_FALLBACK_URL

    if url.startswith('sqlite'):
        if IS_PRODUCTION:
            logger.error("SQLite database not allowed in production environment!")
            sys.exit(1)
        if '+aiosqlite' not in url:
            url = url.replace('sqlite', 'sqlite+aiosqlite', 1)
        return url

    if url.startswith('postgresql+asyncpg://'):
        return url

    # postgres:// and postgresql:// both need the asyncpg driver
    if url.startswith('postgres://') or url.startswith('postgresql://'):
        if url.startswith('postgres://'):
            url = url.replace('postgres://', 'postgresql+asyncpg://', 1)
        else:
            url = url.replace('postgresql://', 'postgresql+asyncpg://', 1)
        logger.info(f"Processed database URL (starts with): {url[:20]}...")
        return url

    logger.warning(f"Unrecognized database URL format: {url[:10]}...")
    return url


SQLALCHEMY_DATABASE_URL = process_database_url(os.getenv('DATABASE_URL', settings.db_url))
logger.info(f"Using database driver: {SQLALCHEMY_DATABASE_URL.split('://')[0]}")

# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""
    metadata = metadata


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every *_at column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE rules unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine with the pool and pragma settings for its backend."""
    options = dict(echo=echo, future=True, pool_pre_ping=True)
    if url.startswith('postgresql'):
        options.update(
            pool_recycle=300,
            pool_timeout=30,
            pool_size=5,
            max_overflow=10,
            connect_args={
                "timeout": 30,
                "command_timeout": 30,
                "server_settings": {"application_name": "monopoly_web"},
            },
        )
    options.update(kwargs)
    new_engine = create_async_engine(url, **options)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


engine = create_engine_for_url(SQLALCHEMY_DATABASE_URL, echo=settings.debug)


def get_engine():
    """Get the SQLAlchemy engine."""
    return engine
