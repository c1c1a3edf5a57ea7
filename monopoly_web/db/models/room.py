import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, utcnow
from monopoly_web.db.models.enums import RoomStatus


class Room(Base):
    """Lobby: the owner creates it and shares the code, others join."""

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("max_players BETWEEN 2 AND 8", name="max_players_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)

    # Deleting an owner must not take the room with it
    owner_player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="RESTRICT"), index=True
    )

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RoomStatus.WAITING.value)
    max_players: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=8)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    owner = relationship("PlayerSession", foreign_keys=[owner_player_session_id])
    players: Mapped[List["RoomPlayer"]] = relationship(
        "RoomPlayer",
        back_populates="room",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RoomPlayer.join_order",
    )
    chat_messages: Mapped[List["ChatMessage"]] = relationship(
        "ChatMessage", back_populates="room", cascade="all, delete-orphan", passive_deletes=True
    )
    game: Mapped[Optional["Game"]] = relationship(
        "Game", back_populates="room", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Room {self.code} ({self.status})>"


class RoomPlayer(Base):
    """Room membership with seat/turn-order data. Composite key (room_id, player_session_id)."""

    __tablename__ = "room_players"
    __table_args__ = (
        UniqueConstraint("room_id", "join_order", name="uq_room_players_room_id_join_order"),
    )

    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True
    )
    player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    join_order: Mapped[int] = mapped_column(Integer, nullable=False)  # seeds turn order
    token: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)  # e.g. "car", "hat"
    is_owner: Mapped[bool] = mapped_column(Boolean, default=False)
    is_connected: Mapped[bool] = mapped_column(Boolean, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    room = relationship("Room", back_populates="players")
    player = relationship("PlayerSession", back_populates="room_memberships")

    def __repr__(self) -> str:
        return f"<RoomPlayer {self.player_session_id} in {self.room_id} seat {self.join_order}>"
