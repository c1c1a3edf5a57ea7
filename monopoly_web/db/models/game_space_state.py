import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base


class GameSpaceState(Base):
    """
    Ownership and development of one board space within one game.

    Composite key (game_id, board_space_id). The board space reference is
    RESTRICT so a definition cannot be deleted out from under live games.
    """

    __tablename__ = "game_space_states"
    __table_args__ = (
        CheckConstraint("houses BETWEEN 0 AND 4", name="houses_range"),
    )

    game_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    board_space_id: Mapped[int] = mapped_column(
        ForeignKey("board_space_definitions.id", ondelete="RESTRICT"), primary_key=True, index=True
    )
    owner_player_session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="SET NULL"), nullable=True, index=True
    )

    houses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_hotel: Mapped[bool] = mapped_column(Boolean, default=False)
    is_mortgaged: Mapped[bool] = mapped_column(Boolean, default=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    game = relationship("Game", back_populates="space_states")
    board_space = relationship("BoardSpaceDefinition")
    owner = relationship("PlayerSession")

    def __repr__(self) -> str:
        return f"<GameSpaceState {self.board_space_id} in {self.game_id} owner={self.owner_player_session_id}>"
