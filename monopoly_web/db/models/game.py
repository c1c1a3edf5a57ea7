import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, utcnow
from monopoly_web.db.models.enums import GameStatus


class Game(Base):
    """
    One started match. Belongs to exactly one room (room_id is unique).

    ``version`` is the optimistic-concurrency stamp: every UPDATE must match
    the version it read, and bumps it.
    """

    __tablename__ = "games"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=GameStatus.IN_PROGRESS.value)
    turn_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_player_session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="SET NULL"), nullable=True
    )
    turn_started_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    winner_player_session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="SET NULL"), nullable=True
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    room = relationship("Room", back_populates="game")
    players: Mapped[List["GamePlayer"]] = relationship(
        "GamePlayer",
        back_populates="game",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GamePlayer.turn_order",
    )
    space_states: Mapped[List["GameSpaceState"]] = relationship(
        "GameSpaceState", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )
    deck_states: Mapped[List["GameDeckState"]] = relationship(
        "GameDeckState", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )
    deck_order: Mapped[List["GameDeckCardOrder"]] = relationship(
        "GameDeckCardOrder", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )
    dice_rolls: Mapped[List["DiceRoll"]] = relationship(
        "DiceRoll", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )
    trade_offers: Mapped[List["TradeOffer"]] = relationship(
        "TradeOffer", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )
    events: Mapped[List["GameEventLog"]] = relationship(
        "GameEventLog", back_populates="game", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Game {self.id} turn {self.turn_number} v{self.version}>"


class GamePlayer(Base):
    """Per-game player state. Composite key (game_id, player_session_id); version-stamped."""

    __tablename__ = "game_players"
    __table_args__ = (
        CheckConstraint("position BETWEEN 0 AND 39", name="position_range"),
        CheckConstraint("jail_turns >= 0", name="jail_turns_non_negative"),
        CheckConstraint("consecutive_doubles >= 0", name="doubles_non_negative"),
        CheckConstraint("auto_roll_strikes >= 0", name="strikes_non_negative"),
    )

    game_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="RESTRICT"), primary_key=True, index=True
    )

    turn_order: Mapped[int] = mapped_column(Integer, nullable=False)  # 0..N-1
    cash: Mapped[int] = mapped_column(Integer, nullable=False, default=1500)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Jail
    in_jail: Mapped[bool] = mapped_column(Boolean, default=False)
    jail_turns: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    consecutive_doubles: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Rolls made on the player's behalf after the turn timer ran out
    auto_roll_strikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_bankrupt: Mapped[bool] = mapped_column(Boolean, default=False)
    bankrupt_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    token: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    game = relationship("Game", back_populates="players")
    player = relationship("PlayerSession")

    def __repr__(self) -> str:
        return f"<GamePlayer {self.player_session_id} in {self.game_id} ${self.cash} @{self.position} v{self.version}>"
