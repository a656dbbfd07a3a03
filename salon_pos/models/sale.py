import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon_pos.database import Base


class PaymentMethod(str, PyEnum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    OTHER = "other"


class DeliveryType(str, PyEnum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class Sale(Base):
    """A committed sale. Never updated after insert."""

    __tablename__ = "sales"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String, default="")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)  # sell price at sale time
    total_price: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    delivery_type: Mapped[DeliveryType] = mapped_column(
        Enum(DeliveryType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)

    product = relationship("Product", lazy="joined")
    seller = relationship("User", lazy="joined")

    @property
    def category(self) -> str:
        return self.product.category if self.product else ""

    @property
    def seller_name(self) -> str:
        return self.seller.name if self.seller else ""
