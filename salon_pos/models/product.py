import uuid
from datetime import date, datetime, timedelta

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_pos.config import settings
from salon_pos.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("min_stock >= 0", name="ck_products_min_stock_non_negative"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    brand: Mapped[str] = mapped_column(String, default="")
    buy_price: Mapped[float] = mapped_column(Float, default=0.0)
    sell_price: Mapped[float] = mapped_column(Float, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, default=0)
    expiration_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    barcode: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    description: Mapped[str] = mapped_column(Text, default="")

    # False once deleted; history rows keep referencing the product
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Bumped on every UPDATE; a stale version raises StaleDataError on flush
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    @property
    def is_expired(self) -> bool:
        return self.expiration_date is not None and self.expiration_date <= date.today()

    @property
    def is_expiring(self) -> bool:
        if self.expiration_date is None:
            return False
        return self.expiration_date <= date.today() + timedelta(days=settings.EXPIRY_WARNING_DAYS)
