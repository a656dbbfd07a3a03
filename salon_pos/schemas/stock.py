from datetime import datetime

from pydantic import BaseModel

from salon_pos.models.stock_movement import MovementType


class StockAdjustmentCreate(BaseModel):
    product_id: str
    type: MovementType  # "in" or "out"; returns go through /stock/returns
    quantity: int
    reason: str


class StockMovementOut(BaseModel):
    id: int
    product_id: str
    product_name: str = ""
    user_id: str | None = None
    type: MovementType
    quantity: int
    reason: str
    reference_id: str = ""
    balance_after: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ReturnCreate(BaseModel):
    product_id: str
    quantity: int
    reason: str
    sale_id: str | None = None


class ReturnOut(BaseModel):
    id: str
    product_id: str
    product_name: str = ""
    user_id: str
    sale_id: str | None = None
    quantity: int
    reason: str
    created_at: datetime

    model_config = {"from_attributes": True}
