from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from salon_pos.api.auth import get_current_user
from salon_pos.database import get_db
from salon_pos.models.user import User
from salon_pos.schemas.sale import SaleCreate, SaleOut, SalesStats
from salon_pos.services import report_service, sales_service
from salon_pos.time_utils import day_end, day_start

router = APIRouter(prefix="/sales", tags=["Sales"])


def scoped_user_id(user: User, user_id: str | None) -> str | None:
    """Sellers only ever see their own sales; admins may filter by seller."""
    return user_id if user.is_admin else user.id


@router.get("", response_model=list[SaleOut])
def list_sales(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user_id: str | None = None,
    product_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return sales_service.list_sales(
        db,
        start=day_start(start_date),
        end=day_end(end_date),
        user_id=scoped_user_id(user, user_id),
        product_id=product_id,
    ).all()


@router.post("", response_model=SaleOut, status_code=201)
def create_sale(data: SaleCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return sales_service.record_sale(
        db,
        product_id=data.product_id,
        quantity=data.quantity,
        payment_method=data.payment_method,
        delivery_type=data.delivery_type,
        seller_id=user.id,
    )


@router.get("/stats", response_model=SalesStats)
def sales_stats(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return report_service.sales_stats(
        db, start=day_start(start_date), end=day_end(end_date), user_id=scoped_user_id(user, user_id)
    )
