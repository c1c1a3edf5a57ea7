import json

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.models import BoardSpaceDefinition, CardDefinition, DeckType
from monopoly_web.db.models.enums import BUYABLE_SPACE_TYPES
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.seed_data import CHANCE_CARDS, COMMUNITY_CHEST_CARDS, board_space_rows
from monopoly_web.db.utils.session_management import commit_or_raise


class BoardRepository(BaseRepository[BoardSpaceDefinition]):
    """Repository for the static board and card definitions."""

    def __init__(self):
        super().__init__(BoardSpaceDefinition)
        self.cards = BaseRepository(CardDefinition)

    async def seed_board_spaces(self, session: AsyncSession) -> int:
        """
        Insert any missing standard board spaces.

        Returns:
            Number of rows inserted
        """
        existing = set((await session.execute(select(BoardSpaceDefinition.index))).scalars().all())
        missing = [BoardSpaceDefinition(**row) for row in board_space_rows() if row["index"] not in existing]
        if missing:
            session.add_all(missing)
            await commit_or_raise(session, table=self.table_name)
            logger.info(f"Seeded {len(missing)} board spaces")
        return len(missing)

    async def seed_cards(self, session: AsyncSession) -> int:
        """
        Insert any missing Chance / Community Chest cards.

        Returns:
            Number of rows inserted
        """
        existing = set(
            (await session.execute(select(CardDefinition.deck_type, CardDefinition.sequence))).all()
        )
        missing = []
        for deck_type, cards in ((DeckType.CHANCE, CHANCE_CARDS), (DeckType.COMMUNITY_CHEST, COMMUNITY_CHEST_CARDS)):
            for sequence, text, action_code, params in cards:
                if (deck_type.value, sequence) in existing:
                    continue
                missing.append(
                    CardDefinition(
                        deck_type=deck_type.value,
                        sequence=sequence,
                        text=text,
                        action_code=action_code,
                        action_json=json.dumps(params) if params else None,
                    )
                )
        if missing:
            session.add_all(missing)
            await commit_or_raise(session, table="card_definitions")
            logger.info(f"Seeded {len(missing)} cards")
        return len(missing)

    async def get_space_by_index(self, session: AsyncSession, index: int) -> BoardSpaceDefinition | None:
        return await self.get_by_attribute(session, "index", index)

    async def list_spaces(self, session: AsyncSession) -> list[BoardSpaceDefinition]:
        """All spaces in board order."""
        return await self.list_by(session, order_by=BoardSpaceDefinition.index)

    async def list_buyable_spaces(self, session: AsyncSession) -> list[BoardSpaceDefinition]:
        return await self.list_by(
            session,
            BoardSpaceDefinition.space_type.in_([t.value for t in BUYABLE_SPACE_TYPES]),
            order_by=BoardSpaceDefinition.index,
        )

    async def list_cards(self, session: AsyncSession, deck_type: DeckType) -> list[CardDefinition]:
        """Cards of one deck in printed order."""
        return await self.cards.list_by(
            session,
            CardDefinition.deck_type == DeckType(deck_type).value,
            order_by=CardDefinition.sequence,
        )

    async def delete_space(self, session: AsyncSession, space_id: int) -> bool:
        """Delete a board space. Raises RestrictedDeleteError while any game uses it."""
        return await self.delete(session, space_id)

    async def delete_card(self, session: AsyncSession, card_id: int) -> bool:
        """Delete a card. Raises RestrictedDeleteError while it sits in a game's deck."""
        return await self.cards.delete(session, card_id)


board_repo = BoardRepository()
