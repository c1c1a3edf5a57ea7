import uuid
from datetime import datetime, timedelta
from typing import Iterable

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from monopoly_web.core.config import get_settings
from monopoly_web.db.base import utcnow
from monopoly_web.db.exceptions import InvalidInputError, InvalidStateError, RecordNotFoundError
from monopoly_web.db.models import GamePlayer, TradeOffer, TradeOfferProperty, TradeOfferStatus
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.utils.session_management import commit_or_raise


class TradeOfferRepository(BaseRepository[TradeOffer]):
    """
    Repository for trade offers.

    Only the offer's lifecycle is stored here; moving cash and deeds when an
    offer is accepted belongs to the rules engine.
    """

    def __init__(self):
        super().__init__(TradeOffer)

    async def create_offer(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        from_player_id: uuid.UUID,
        to_player_id: uuid.UUID,
        from_cash: int = 0,
        to_cash: int = 0,
        from_gives: Iterable[int] = (),
        to_gives: Iterable[int] = (),
        ttl_seconds: int | None = None,
    ) -> TradeOffer:
        """
        Propose a trade.

        Args:
            session: Database session
            game_id: Game the players are in
            from_player_id: Proposer
            to_player_id: Recipient
            from_cash: Cash the proposer gives
            to_cash: Cash the recipient gives
            from_gives: Board space ids moving proposer -> recipient
            to_gives: Board space ids moving recipient -> proposer
            ttl_seconds: Seconds until the offer expires; defaults to
                TRADE_OFFER_TTL_SECONDS, 0 means never

        Returns:
            The pending offer with its properties
        """
        if from_player_id == to_player_id:
            raise InvalidInputError("A player cannot trade with themselves")
        if from_cash < 0 or to_cash < 0:
            raise InvalidInputError("Trade cash must not be negative", {"from_cash": from_cash, "to_cash": to_cash})

        from_gives = list(from_gives)
        to_gives = list(to_gives)
        overlap = set(from_gives) & set(to_gives)
        if overlap:
            raise InvalidInputError("A space cannot move both ways", {"board_space_ids": sorted(overlap)})
        if not (from_cash or to_cash or from_gives or to_gives):
            raise InvalidInputError("A trade must include cash or property")

        seated = set(
            (
                await session.execute(
                    select(GamePlayer.player_session_id).where(
                        GamePlayer.game_id == game_id,
                        GamePlayer.player_session_id.in_([from_player_id, to_player_id]),
                    )
                )
            ).scalars().all()
        )
        outsiders = {from_player_id, to_player_id} - seated
        if outsiders:
            raise InvalidInputError(
                "Both players must be in the game",
                {"game_id": str(game_id), "player_ids": sorted(str(p) for p in outsiders)},
            )

        if ttl_seconds is None:
            ttl_seconds = get_settings().TRADE_OFFER_TTL_SECONDS
        now = utcnow()

        offer = TradeOffer(
            game_id=game_id,
            from_player_session_id=from_player_id,
            to_player_session_id=to_player_id,
            from_cash=from_cash,
            to_cash=to_cash,
            status=TradeOfferStatus.PENDING.value,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds) if ttl_seconds else None,
        )
        offer.properties.extend(
            TradeOfferProperty(board_space_id=space_id, is_from_player_gives=True) for space_id in from_gives
        )
        offer.properties.extend(
            TradeOfferProperty(board_space_id=space_id, is_from_player_gives=False) for space_id in to_gives
        )
        session.add(offer)
        await commit_or_raise(session, table=self.table_name)
        logger.info(f"Trade {offer.id} proposed in game {game_id}: {from_player_id} -> {to_player_id}")
        return offer

    async def get_with_properties(self, session: AsyncSession, offer_id: uuid.UUID) -> TradeOffer | None:
        stmt = (
            select(TradeOffer)
            .where(TradeOffer.id == offer_id)
            .options(selectinload(TradeOffer.properties))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _close(
        self,
        session: AsyncSession,
        offer_id: uuid.UUID,
        status: TradeOfferStatus,
        acting_player_id: uuid.UUID | None,
        must_be_recipient: bool,
    ) -> TradeOffer:
        offer = await self.get_with_properties(session, offer_id)
        if offer is None:
            raise RecordNotFoundError("Trade offer not found", {"offer_id": str(offer_id)})

        if acting_player_id is not None:
            allowed = offer.to_player_session_id if must_be_recipient else offer.from_player_session_id
            if acting_player_id != allowed:
                raise InvalidStateError(
                    f"Player cannot mark this offer {status.value}",
                    {"offer_id": str(offer_id), "player_id": str(acting_player_id)},
                )

        now = utcnow()
        if status == TradeOfferStatus.ACCEPTED and offer.expires_at is not None and offer.expires_at <= now:
            raise InvalidStateError("Trade offer has expired", {"offer_id": str(offer_id)})

        # Conditional so two responders cannot both win
        result = await session.execute(
            update(TradeOffer)
            .where(TradeOffer.id == offer_id, TradeOffer.status == TradeOfferStatus.PENDING.value)
            .values(status=status.value, responded_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await session.rollback()
            current = await self.reload(session, offer_id)
            raise InvalidStateError(
                "Trade offer is no longer pending",
                {"offer_id": str(offer_id), "status": current.status if current else None},
            )
        await commit_or_raise(session, table=self.table_name)
        return await self.get_with_properties(session, offer_id)

    async def accept(
        self, session: AsyncSession, offer_id: uuid.UUID, player_id: uuid.UUID | None = None
    ) -> TradeOffer:
        """Accept a pending, unexpired offer (recipient only when player_id is given)."""
        return await self._close(session, offer_id, TradeOfferStatus.ACCEPTED, player_id, must_be_recipient=True)

    async def reject(
        self, session: AsyncSession, offer_id: uuid.UUID, player_id: uuid.UUID | None = None
    ) -> TradeOffer:
        """Reject a pending offer (recipient only when player_id is given)."""
        return await self._close(session, offer_id, TradeOfferStatus.REJECTED, player_id, must_be_recipient=True)

    async def cancel(
        self, session: AsyncSession, offer_id: uuid.UUID, player_id: uuid.UUID | None = None
    ) -> TradeOffer:
        """Withdraw a pending offer (proposer only when player_id is given)."""
        return await self._close(session, offer_id, TradeOfferStatus.CANCELLED, player_id, must_be_recipient=False)

    async def expire_pending(self, session: AsyncSession, now: datetime | None = None) -> int:
        """
        Mark every pending offer past its expiry as expired.

        Returns:
            Number of offers expired
        """
        now = now or utcnow()
        result = await session.execute(
            update(TradeOffer)
            .where(
                TradeOffer.status == TradeOfferStatus.PENDING.value,
                TradeOffer.expires_at.is_not(None),
                TradeOffer.expires_at <= now,
            )
            .values(status=TradeOfferStatus.EXPIRED.value, responded_at=now)
            .execution_options(synchronize_session=False)
        )
        await commit_or_raise(session, table=self.table_name)
        if result.rowcount:
            logger.info(f"Expired {result.rowcount} trade offers")
        return result.rowcount

    async def list_pending(self, session: AsyncSession, game_id: uuid.UUID) -> list[TradeOffer]:
        stmt = (
            select(TradeOffer)
            .where(TradeOffer.game_id == game_id, TradeOffer.status == TradeOfferStatus.PENDING.value)
            .options(selectinload(TradeOffer.properties))
            .order_by(TradeOffer.created_at)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


trade_offer_repo = TradeOfferRepository()
