from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from monopoly_web.db.base import Base
from monopoly_web.db.models.enums import BUYABLE_SPACE_TYPES, ColorGroup


class BoardSpaceDefinition(Base):
    """
    Static, edition-wide description of one board space.

    Seeded once at startup and shared by every game. Per-game ownership lives
    in GameSpaceState, which keeps these rows from being deleted.
    """

    __tablename__ = "board_space_definitions"
    __table_args__ = (
        CheckConstraint('"index" BETWEEN 0 AND 39', name="index_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    index: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)  # 0..39 around the board

    name: Mapped[str] = mapped_column(String(64), nullable=False)
    space_type: Mapped[str] = mapped_column(String(20), nullable=False)
    color_group: Mapped[str] = mapped_column(String(20), nullable=False, default=ColorGroup.NONE.value)

    # Buyable spaces
    purchase_price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mortgage_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    house_cost: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Rent table (null for non-properties)
    rent0: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rent1: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rent2: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rent3: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rent4: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rent_hotel: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Tax spaces
    tax_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    @property
    def is_buyable(self) -> bool:
        return self.space_type in BUYABLE_SPACE_TYPES

    @property
    def rents(self) -> list[Optional[int]]:
        return [self.rent0, self.rent1, self.rent2, self.rent3, self.rent4, self.rent_hotel]

    def __repr__(self) -> str:
        return f"<BoardSpaceDefinition {self.index}: {self.name}>"
