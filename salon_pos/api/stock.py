from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from salon_pos.api.auth import get_current_user, require_admin
from salon_pos.database import get_db
from salon_pos.models.stock_movement import MovementType
from salon_pos.models.user import User
from salon_pos.schemas.stock import ReturnCreate, ReturnOut, StockAdjustmentCreate, StockMovementOut
from salon_pos.services import ledger_service, return_service, stock_service
from salon_pos.time_utils import day_end, day_start

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("/movements", response_model=list[StockMovementOut])
def list_movements(
    product_id: str | None = None,
    type: MovementType | None = None,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    limit: int = Query(500, ge=1, le=5000),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ledger_service.list_movements(
        db,
        product_id=product_id,
        movement_type=type,
        start=day_start(start_date),
        end=day_end(end_date),
    ).limit(limit).all()


@router.post("/movements", response_model=StockMovementOut, status_code=201)
def create_movement(
    data: StockAdjustmentCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return stock_service.record_adjustment(
        db,
        product_id=data.product_id,
        movement_type=data.type,
        quantity=data.quantity,
        reason=data.reason,
        user_id=admin.id,
    )


@router.get("/returns", response_model=list[ReturnOut])
def list_returns(
    product_id: str | None = None,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return return_service.list_returns(
        db, product_id=product_id, start=day_start(start_date), end=day_end(end_date)
    ).all()


@router.post("/returns", response_model=ReturnOut, status_code=201)
def create_return(data: ReturnCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return return_service.record_return(
        db,
        product_id=data.product_id,
        quantity=data.quantity,
        reason=data.reason,
        user_id=admin.id,
        sale_id=data.sale_id,
    )
