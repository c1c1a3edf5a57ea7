import random
import uuid

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.exceptions import ConcurrencyConflictError, InvalidStateError, RecordNotFoundError
from monopoly_web.db.models import CardDefinition, DeckType, GameDeckCardOrder, GameDeckState
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.utils.session_management import commit_or_raise


class DeckRepository(BaseRepository[GameDeckState]):
    """
    Repository for per-game decks.

    A deck is an explicit card order plus a draw cursor, so the same order
    comes back after a restart instead of being reshuffled.
    """

    def __init__(self):
        super().__init__(GameDeckState)

    async def build_decks(self, session: AsyncSession, game_id: uuid.UUID, rng: random.Random) -> None:
        """
        Shuffle every deck for a new game and stage the rows.

        Does not commit; the caller owns the transaction.
        """
        for deck_type in DeckType:
            result = await session.execute(
                select(CardDefinition.id)
                .where(CardDefinition.deck_type == deck_type.value)
                .order_by(CardDefinition.sequence)
            )
            card_ids = list(result.scalars().all())
            if not card_ids:
                raise InvalidStateError(
                    f"No {deck_type.value} cards defined; seed the card table first",
                    {"deck_type": deck_type.value},
                )
            rng.shuffle(card_ids)
            session.add(GameDeckState(game_id=game_id, deck_type=deck_type.value, next_draw_index=0))
            session.add_all(
                GameDeckCardOrder(
                    game_id=game_id,
                    deck_type=deck_type.value,
                    order_index=position,
                    card_definition_id=card_id,
                )
                for position, card_id in enumerate(card_ids)
            )

    async def peek_order(
        self, session: AsyncSession, game_id: uuid.UUID, deck_type: DeckType
    ) -> list[CardDefinition]:
        """Cards of a game's deck in draw order."""
        stmt = (
            select(CardDefinition)
            .join(GameDeckCardOrder, GameDeckCardOrder.card_definition_id == CardDefinition.id)
            .where(
                GameDeckCardOrder.game_id == game_id,
                GameDeckCardOrder.deck_type == DeckType(deck_type).value,
            )
            .order_by(GameDeckCardOrder.order_index)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def draw_card(
        self, session: AsyncSession, game_id: uuid.UUID, deck_type: DeckType
    ) -> CardDefinition:
        """
        Draw the card under the cursor and advance it, wrapping at the end.

        The cursor only moves if nobody else moved it first; a concurrent
        draw raises ConcurrencyConflictError.
        """
        deck_value = DeckType(deck_type).value
        state = await self.reload(session, (game_id, deck_value))
        if state is None:
            raise RecordNotFoundError(
                "Deck not found", {"game_id": str(game_id), "deck_type": deck_value}
            )
        cursor = state.next_draw_index

        size = (
            await session.execute(
                select(func.count())
                .select_from(GameDeckCardOrder)
                .where(GameDeckCardOrder.game_id == game_id, GameDeckCardOrder.deck_type == deck_value)
            )
        ).scalar_one()
        if size == 0:
            raise InvalidStateError("Deck is empty", {"game_id": str(game_id), "deck_type": deck_value})

        card = (
            await session.execute(
                select(CardDefinition)
                .join(GameDeckCardOrder, GameDeckCardOrder.card_definition_id == CardDefinition.id)
                .where(
                    GameDeckCardOrder.game_id == game_id,
                    GameDeckCardOrder.deck_type == deck_value,
                    GameDeckCardOrder.order_index == cursor % size,
                )
            )
        ).scalar_one()

        result = await session.execute(
            update(GameDeckState)
            .where(
                GameDeckState.game_id == game_id,
                GameDeckState.deck_type == deck_value,
                GameDeckState.next_draw_index == cursor,
            )
            .values(next_draw_index=(cursor + 1) % size)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise ConcurrencyConflictError(
                "Deck was drawn from concurrently",
                {"game_id": str(game_id), "deck_type": deck_value, "cursor": cursor},
            )
        await commit_or_raise(session, table=self.table_name)
        logger.debug(f"Game {game_id} drew {deck_value} card {card.sequence}")
        return card


deck_repo = DeckRepository()
