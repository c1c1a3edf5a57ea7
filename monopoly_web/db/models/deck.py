import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base


class GameDeckState(Base):
    """Draw cursor for one deck in one game. Composite key (game_id, deck_type)."""

    __tablename__ = "game_deck_states"
    __table_args__ = (
        CheckConstraint("next_draw_index >= 0", name="next_draw_index_non_negative"),
    )

    game_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    deck_type: Mapped[str] = mapped_column(String(20), primary_key=True)
    next_draw_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    game = relationship("Game", back_populates="deck_states")

    def __repr__(self) -> str:
        return f"<GameDeckState {self.deck_type} in {self.game_id} next={self.next_draw_index}>"


class GameDeckCardOrder(Base):
    """
    One slot of a shuffled deck. Composite key (game_id, deck_type, order_index).

    Persisting the order lets a deck be rebuilt exactly after a restart
    instead of being reshuffled in memory.
    """

    __tablename__ = "game_deck_card_orders"

    game_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    deck_type: Mapped[str] = mapped_column(String(20), primary_key=True)
    order_index: Mapped[int] = mapped_column(Integer, primary_key=True)  # 0..N-1
    card_definition_id: Mapped[int] = mapped_column(
        ForeignKey("card_definitions.id", ondelete="RESTRICT"), index=True
    )

    game = relationship("Game", back_populates="deck_order")
    card = relationship("CardDefinition")
