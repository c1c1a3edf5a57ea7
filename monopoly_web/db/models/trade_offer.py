import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from monopoly_web.db.base import Base, BigIntPK, utcnow
from monopoly_web.db.models.enums import TradeOfferStatus


class TradeOffer(Base):
    """
    A proposed trade between two players of one game.

    Cash direction is explicit: ``from_cash`` is what the proposer gives,
    ``to_cash`` is what the recipient gives back.
    """

    __tablename__ = "trade_offers"
    __table_args__ = (
        CheckConstraint("from_cash >= 0", name="from_cash_non_negative"),
        CheckConstraint("to_cash >= 0", name="to_cash_non_negative"),
        CheckConstraint("from_player_session_id <> to_player_session_id", name="distinct_players"),
        Index("ix_trade_offers_game_id_status", "game_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    game_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"))
    from_player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="RESTRICT"), index=True
    )
    to_player_session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("player_sessions.id", ondelete="RESTRICT"), index=True
    )

    from_cash: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    to_cash: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=TradeOfferStatus.PENDING.value)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    game = relationship("Game", back_populates="trade_offers")
    from_player = relationship("PlayerSession", foreign_keys=[from_player_session_id])
    to_player = relationship("PlayerSession", foreign_keys=[to_player_session_id])
    properties: Mapped[List["TradeOfferProperty"]] = relationship(
        "TradeOfferProperty", back_populates="trade_offer", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<TradeOffer {self.id} {self.status}>"


class TradeOfferProperty(Base):
    """
    A board space included in a trade.

    ``is_from_player_gives`` true means the space moves proposer -> recipient,
    false means recipient -> proposer.
    """

    __tablename__ = "trade_offer_properties"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    trade_offer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("trade_offers.id", ondelete="CASCADE"), index=True
    )
    board_space_id: Mapped[int] = mapped_column(
        ForeignKey("board_space_definitions.id", ondelete="RESTRICT"), index=True
    )
    is_from_player_gives: Mapped[bool] = mapped_column(Boolean, nullable=False)

    trade_offer = relationship("TradeOffer", back_populates="properties")
    board_space = relationship("BoardSpaceDefinition")
