from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salon_pos.api.auth import require_admin
from salon_pos.database import get_db
from salon_pos.models.user import User
from salon_pos.services import report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/inventory")
def inventory_report(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return report_service.inventory_summary(db)


@router.get("/top-products")
def top_products_report(limit: int = 10, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return report_service.top_products(db, limit=limit)


@router.get("/ledger-check")
def ledger_check_report(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return report_service.ledger_check(db)
