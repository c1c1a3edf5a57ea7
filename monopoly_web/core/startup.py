"""
Application startup tasks.
"""
from loguru import logger
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from monopoly_web.db.models import RoomPlayer
from monopoly_web.db.repositories.trade import trade_offer_repo
from monopoly_web.db.utils.session_management import commit_or_raise


async def mark_all_disconnected(session: AsyncSession) -> int:
    """
    Flag every seat as disconnected.

    Nobody holds a live connection right after a restart; clients flip their
    seat back when they reconnect.
    """
    result = await session.execute(
        update(RoomPlayer)
        .where(RoomPlayer.is_connected.is_(True))
        .values(is_connected=False)
        .execution_options(synchronize_session=False)
    )
    await commit_or_raise(session, table=RoomPlayer.__tablename__)
    return result.rowcount


async def run_integrity_checks(session: AsyncSession) -> dict:
    """
    Run database maintenance after a restart.

    Args:
        session: Database session

    Returns:
        Counts of rows touched per task
    """
    logger.info("Expiring stale trade offers...")
    expired = await trade_offer_repo.expire_pending(session)
    logger.info(f"Expired {expired} trade offers")

    logger.info("Resetting connection flags...")
    disconnected = await mark_all_disconnected(session)
    logger.info(f"Marked {disconnected} seats disconnected")

    return {"expired_trades": expired, "disconnected_seats": disconnected}


async def run_startup_tasks(session_factory: async_sessionmaker) -> dict:
    """Run the startup maintenance tasks in a fresh session."""
    logger.info("Starting database integrity checks...")
    async with session_factory() as session:
        results = await run_integrity_checks(session)
    logger.info("Database integrity checks completed.")
    return results
