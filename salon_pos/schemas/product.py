from datetime import date, datetime

from pydantic import BaseModel, Field

from salon_pos.config import settings
from salon_pos.schemas.sale import SaleOut
from salon_pos.schemas.stock import ReturnOut, StockMovementOut


class ProductCreate(BaseModel):
    name: str
    category: str
    brand: str = ""
    buy_price: float = Field(0.0, ge=0)
    sell_price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(default_factory=lambda: settings.LOW_STOCK_DEFAULT_THRESHOLD, ge=0)
    expiration_date: date | None = None
    barcode: str | None = None
    description: str = ""


class ProductUpdate(BaseModel):
    name: str | None = None
    category: str | None = None
    brand: str | None = None
    buy_price: float | None = Field(None, ge=0)
    sell_price: float | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)  # a change here is booked as a "manual edit" movement
    min_stock: int | None = Field(None, ge=0)
    expiration_date: date | None = None
    barcode: str | None = None
    description: str | None = None


class ProductOut(BaseModel):
    id: str
    name: str
    category: str
    brand: str
    buy_price: float
    sell_price: float
    stock: int
    min_stock: int
    expiration_date: date | None = None
    barcode: str | None = None
    description: str
    active: bool
    is_low_stock: bool
    is_expired: bool
    is_expiring: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductDetail(ProductOut):
    recent_sales: list[SaleOut] = []
    recent_movements: list[StockMovementOut] = []
    recent_returns: list[ReturnOut] = []
