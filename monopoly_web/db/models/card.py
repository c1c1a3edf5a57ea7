import json
from typing import Any, Optional

from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from monopoly_web.db.base import Base


class CardDefinition(Base):
    """Static Chance / Community Chest card. The action JSON carries the rule parameters."""

    __tablename__ = "card_definitions"
    __table_args__ = (
        UniqueConstraint("deck_type", "sequence", name="uq_card_definitions_deck_type_sequence"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    deck_type: Mapped[str] = mapped_column(String(20), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)  # printed order within the deck

    text: Mapped[str] = mapped_column(String(256), nullable=False)
    action_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)  # MOVE_TO, PAY_BANK, ...
    action_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # {"to": 0}

    @property
    def action_params(self) -> dict[str, Any]:
        return json.loads(self.action_json) if self.action_json else {}

    def __repr__(self) -> str:
        return f"<CardDefinition {self.deck_type}#{self.sequence}: {self.action_code}>"
