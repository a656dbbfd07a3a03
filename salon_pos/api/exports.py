from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from salon_pos.api.auth import get_current_user, require_admin
from salon_pos.api.sales import scoped_user_id
from salon_pos.database import get_db
from salon_pos.models.user import User
from salon_pos.services import export_service, ledger_service, product_service, sales_service
from salon_pos.time_utils import day_end, day_start

router = APIRouter(prefix="/export", tags=["Export"])


def _csv_response(content: str, prefix: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_service.export_filename(prefix, 'csv')}"},
    )


def _xlsx_response(content: bytes, prefix: str) -> Response:
    return Response(
        content=content,
        media_type=export_service.XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_service.export_filename(prefix, 'xlsx')}"},
    )


def _pdf_response(content: bytes, prefix: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={export_service.export_filename(prefix, 'pdf')}"},
    )


@router.get("/products/csv")
def export_products_csv(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return _csv_response(export_service.products_csv(product_service.list_products(db)), "products")


@router.get("/products/excel")
def export_products_excel(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return _xlsx_response(export_service.products_xlsx(product_service.list_products(db)), "products")


@router.get("/products/pdf")
def export_products_pdf(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return _pdf_response(export_service.products_pdf(product_service.list_products(db)), "products")


def _sales_for_export(db: Session, user: User, start_date, end_date, user_id):
    return sales_service.list_sales(
        db, start=day_start(start_date), end=day_end(end_date), user_id=scoped_user_id(user, user_id)
    ).all()


@router.get("/sales/csv")
def export_sales_csv(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    sales = _sales_for_export(db, user, start_date, end_date, user_id)
    return _csv_response(export_service.sales_csv(sales), "sales")


@router.get("/sales/excel")
def export_sales_excel(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    sales = _sales_for_export(db, user, start_date, end_date, user_id)
    return _xlsx_response(export_service.sales_xlsx(sales), "sales")


@router.get("/sales/pdf")
def export_sales_pdf(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    sales = _sales_for_export(db, user, start_date, end_date, user_id)
    return _pdf_response(export_service.sales_pdf(sales, start=start_date, end=end_date), "sales")


@router.get("/movements/csv")
def export_movements_csv(
    product_id: str | None = None,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    movements = ledger_service.list_movements(
        db, product_id=product_id, start=day_start(start_date), end=day_end(end_date)
    )
    return _csv_response(export_service.movements_csv(movements), "stock_movements")


@router.get("/movements/excel")
def export_movements_excel(
    product_id: str | None = None,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    movements = ledger_service.list_movements(
        db, product_id=product_id, start=day_start(start_date), end=day_end(end_date)
    )
    return _xlsx_response(export_service.movements_xlsx(movements), "stock_movements")
