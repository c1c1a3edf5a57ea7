import asyncio

from loguru import logger
from sqlalchemy import inspect, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Import models at module level to register them with Base metadata
import monopoly_web.db.models  # noqa: F401
from monopoly_web.db.base import Base
from monopoly_web.db.repositories.board import board_repo


async def create_schema(engine: AsyncEngine, max_retries: int = 5, retry_delay: float = 2) -> None:
    """Create any missing tables, retrying while the database comes up.

    Args:
        engine: Engine to create the schema on
        max_retries: Maximum number of connection attempts
        retry_delay: Delay before the first retry in seconds, doubled each time
    """
    logger.info(f"Initializing database with driver: {engine.url.drivername}")

    for attempt in range(max_retries):
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
                missing = sorted(set(Base.metadata.tables) - set(tables))
                if missing:
                    logger.info(f"Creating tables: {missing}")
                    await conn.run_sync(Base.metadata.create_all)
                else:
                    logger.info(f"Found existing tables: {sorted(tables)}")
            return
        except (OSError, DBAPIError) as e:
            logger.error(f"Database connection error (attempt {attempt + 1}/{max_retries}): {e}")
            if attempt == max_retries - 1:
                logger.error(f"Failed to connect to database after {max_retries} attempts")
                raise
            delay = retry_delay * (2 ** attempt)  # Exponential backoff
            logger.info(f"Retrying in {delay} seconds...")
            await asyncio.sleep(delay)


async def seed_static_data(session: AsyncSession) -> tuple[int, int]:
    """Insert the standard board and card decks if they are missing.

    Returns:
        (spaces inserted, cards inserted)
    """
    spaces = await board_repo.seed_board_spaces(session)
    cards = await board_repo.seed_cards(session)
    return spaces, cards


async def init_db(engine: AsyncEngine, seed: bool = True, max_retries: int = 5, retry_delay: float = 2) -> None:
    """Initialize the database: create tables and, optionally, seed static data."""
    await create_schema(engine, max_retries=max_retries, retry_delay=retry_delay)
    if not seed:
        return
    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        spaces, cards = await seed_static_data(session)
    logger.info(f"Database initialization complete ({spaces} spaces, {cards} cards seeded)")
