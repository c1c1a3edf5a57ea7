import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, SmallInteger
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, BigIntPK, utcnow


class DiceRoll(Base):
    """Append-only record of one roll."""
    __tablename__ = "dice_rolls"
    __table_args__ = (
        CheckConstraint("die1 BETWEEN 1 AND 6", name="die1_range"),
        CheckConstraint("die2 BETWEEN 1 AND 6", name="die2_range"),
        Index("ix_dice_rolls_game_id_turn_number", "game_id", "turn_number"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    game_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"))
    player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="RESTRICT"), index=True
    )
    turn_number: Mapped[int] = mapped_column(Integer, nullable=False)
    die1: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    die2: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    is_auto_roll: Mapped[bool] = mapped_column(Boolean, default=False)
    rolled_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    game = relationship("Game", back_populates="dice_rolls")
    player = relationship("PlayerSession")

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @property
    def is_double(self) -> bool:
        return self.die1 == self.die2
