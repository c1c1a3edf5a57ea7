import uuid
from datetime import datetime
from typing import List

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, utcnow


class PlayerSession(Base):
    """
    Lightweight identity for a connected participant.

    The session token is handed to the browser (cookie) so a refresh or
    reconnect keeps the same identity.
    """

    __tablename__ = "player_sessions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    display_name: Mapped[str] = mapped_column(String(32), nullable=False)
    session_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    room_memberships: Mapped[List["RoomPlayer"]] = relationship(
        "RoomPlayer", back_populates="player", cascade="all, delete-orphan", passive_deletes=True
    )
    # Chat history survives the session; the database nulls the reference
    chat_messages: Mapped[List["ChatMessage"]] = relationship(
        "ChatMessage", back_populates="player", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<PlayerSession {self.id} ({self.display_name})>"
