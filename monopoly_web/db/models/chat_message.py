import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, BigIntPK, utcnow


class ChatMessage(Base):
    """Room-wide chat line. The sender name is copied so history outlives the session."""
    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_room_id_sent_at", "room_id", "sent_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    room_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"))
    player_session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="SET NULL"), nullable=True
    )
    player_name: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(String(500), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    room = relationship("Room", back_populates="chat_messages")
    player = relationship("PlayerSession", back_populates="chat_messages")
