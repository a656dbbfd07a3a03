from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon_pos.database import Base


class MovementType(str, PyEnum):
    IN = "in"
    OUT = "out"
    RETURN = "return"


class StockMovement(Base):
    """Append-only audit trail of every stock change."""

    __tablename__ = "stock_movements"

    # Integer key doubles as insertion sequence for ordering ties on created_at
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String, ForeignKey("users.id"), nullable=True)
    type: Mapped[MovementType] = mapped_column(
        Enum(MovementType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # always positive
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reference_id: Mapped[str] = mapped_column(String, default="")  # sale or return id
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)

    product = relationship("Product", lazy="joined")

    @property
    def delta(self) -> int:
        return -self.quantity if self.type == MovementType.OUT else self.quantity

    @property
    def product_name(self) -> str:
        return self.product.name if self.product else ""
