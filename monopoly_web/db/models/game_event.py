import json
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, BigIntPK, utcnow


class GameEventLog(Base):
    """
    Append-only structured event stream for a game.

    Clients replay it (ordered by id) to catch up after reconnecting.
    """
    __tablename__ = "game_events"
    __table_args__ = (
        Index("ix_game_events_game_id_created_at", "game_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    game_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"))
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)  # PLAYER_MOVED, BOUGHT_PROPERTY
    payload_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON-serialized payload
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    game = relationship("Game", back_populates="events")

    @property
    def payload(self) -> Any:
        return json.loads(self.payload_json) if self.payload_json else None

    def __repr__(self) -> str:
        return f"<GameEventLog {self.id} {self.event_type}>"
