from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salon_pos.api.auth import get_current_user, require_admin
from salon_pos.database import get_db
from salon_pos.models.user import User
from salon_pos.schemas.product import ProductCreate, ProductDetail, ProductOut, ProductUpdate
from salon_pos.schemas.sale import SaleOut
from salon_pos.schemas.stock import ReturnOut, StockMovementOut
from salon_pos.services import product_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[ProductOut])
def list_products(
    category: str | None = None,
    include_inactive: bool = False,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return product_service.list_products(db, category=category, include_inactive=include_inactive and user.is_admin)


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return product_service.get_low_stock(db)


@router.get("/expiring", response_model=list[ProductOut])
def expiring(days: int | None = None, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return product_service.get_expiring(db, days=days)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return product_service.create_product(db, data, user_id=admin.id)


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(product_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id, include_inactive=user.is_admin)
    history = product_service.get_history(db, product.id, seller_id=None if user.is_admin else user.id)
    return ProductDetail(
        **ProductOut.model_validate(product).model_dump(),
        recent_sales=[SaleOut.model_validate(s) for s in history["recent_sales"]],
        recent_movements=[StockMovementOut.model_validate(m) for m in history["recent_movements"]],
        recent_returns=[ReturnOut.model_validate(r) for r in history["recent_returns"]],
    )


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    data: ProductUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return product_service.update_product(db, product_id, data, user_id=admin.id)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    product_service.delete_product(db, product_id)
