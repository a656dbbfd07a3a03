from datetime import datetime

from pydantic import BaseModel

from salon_pos.models.sale import DeliveryType, PaymentMethod


class SaleCreate(BaseModel):
    product_id: str
    quantity: int
    payment_method: PaymentMethod
    delivery_type: DeliveryType


class SaleOut(BaseModel):
    id: str
    product_id: str
    product_name: str
    category: str = ""
    user_id: str
    seller_name: str = ""
    quantity: int
    unit_price: float
    total_price: float
    payment_method: PaymentMethod
    delivery_type: DeliveryType
    created_at: datetime

    model_config = {"from_attributes": True}


class SalesBreakdown(BaseModel):
    key: str
    count: int
    revenue: float


class SalesStats(BaseModel):
    total_sales: int
    total_quantity: int
    total_revenue: float
    by_payment_method: list[SalesBreakdown]
    by_delivery_type: list[SalesBreakdown]
