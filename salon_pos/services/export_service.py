"""CSV, Excel and PDF renderings of products, sales and stock movements."""

import csv
import io
from datetime import date
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from salon_pos.models.product import Product
from salon_pos.models.sale import Sale
from salon_pos.models.stock_movement import StockMovement

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE6E6FA")
SUMMARY_FILL = PatternFill(fill_type="solid", fgColor="FFD3D3D3")
EXPIRING_FILL = PatternFill(fill_type="solid", fgColor="FFFFFF00")
LOW_STOCK_FILL = PatternFill(fill_type="solid", fgColor="FFFF6B6B")

PRODUCT_COLUMNS = [
    ("Name", 25), ("Category", 20), ("Brand", 18), ("Buy price", 12), ("Sell price", 12),
    ("Stock", 10), ("Min stock", 10), ("Expiration date", 16), ("Barcode", 16), ("Created", 20),
]
SALE_COLUMNS = [
    ("Date", 20), ("Product", 25), ("Category", 20), ("Quantity", 10), ("Unit price", 12),
    ("Total price", 14), ("Payment method", 16), ("Delivery type", 16), ("Seller", 20),
]
MOVEMENT_COLUMNS = [
    ("Date", 20), ("Product", 25), ("Type", 10), ("Quantity", 10), ("Balance after", 14), ("Reason", 40),
]


def export_filename(prefix: str, extension: str) -> str:
    return f"{prefix}_{date.today().isoformat()}.{extension}"


def _fmt_datetime(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


def _product_row(p: Product) -> list:
    return [
        p.name, p.category, p.brand, p.buy_price, p.sell_price, p.stock, p.min_stock,
        p.expiration_date.isoformat() if p.expiration_date else "",
        p.barcode or "", _fmt_datetime(p.created_at),
    ]


def _sale_row(s: Sale) -> list:
    return [
        _fmt_datetime(s.created_at), s.product_name, s.category, s.quantity, s.unit_price,
        s.total_price, s.payment_method.value, s.delivery_type.value, s.seller_name,
    ]


def _sales_total_row(sales: list[Sale]) -> list:
    return [
        "TOTAL", "", "", sum(s.quantity for s in sales), "",
        round(sum(s.total_price for s in sales), 2), "", "", "",
    ]


def _movement_row(m: StockMovement) -> list:
    return [_fmt_datetime(m.created_at), m.product_name, m.type.value, m.quantity, m.balance_after, m.reason]


# --- CSV ---

def _to_csv(columns: list[tuple[str, int]], rows: Iterable[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([name for name, _ in columns])
    writer.writerows(rows)
    return buf.getvalue()


def products_csv(products: list[Product]) -> str:
    return _to_csv(PRODUCT_COLUMNS, (_product_row(p) for p in products))


def sales_csv(sales: list[Sale]) -> str:
    rows = [_sale_row(s) for s in sales]
    rows.append(_sales_total_row(sales))
    return _to_csv(SALE_COLUMNS, rows)


def movements_csv(movements: Iterable[StockMovement]) -> str:
    return _to_csv(MOVEMENT_COLUMNS, (_movement_row(m) for m in movements))


# --- Excel ---

def _new_sheet(title: str, columns: list[tuple[str, int]]):
    wb = Workbook()
    ws = wb.active
    ws.title = title
    ws.append([name for name, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.fill = HEADER_FILL
    return wb, ws


def _save(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def products_xlsx(products: list[Product]) -> bytes:
    wb, ws = _new_sheet("Products", PRODUCT_COLUMNS)
    stock_col = 6
    for p in products:
        ws.append(_product_row(p))
        row = ws[ws.max_row]
        if p.is_expiring:
            for cell in row:
                cell.fill = EXPIRING_FILL
        if p.is_low_stock:
            row[stock_col - 1].fill = LOW_STOCK_FILL
    return _save(wb)


def sales_xlsx(sales: list[Sale]) -> bytes:
    wb, ws = _new_sheet("Sales", SALE_COLUMNS)
    for s in sales:
        ws.append(_sale_row(s))
    ws.append(_sales_total_row(sales))
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)
        cell.fill = SUMMARY_FILL
    return _save(wb)


def movements_xlsx(movements: Iterable[StockMovement]) -> bytes:
    wb, ws = _new_sheet("Stock movements", MOVEMENT_COLUMNS)
    for m in movements:
        ws.append(_movement_row(m))
    return _save(wb)


# --- PDF ---

PDF_HEADER_COLOR = colors.HexColor("#E6E6FA")
PDF_SUMMARY_COLOR = colors.HexColor("#D3D3D3")
PDF_EXPIRING_COLOR = colors.HexColor("#FFFF00")
PDF_LOW_STOCK_COLOR = colors.HexColor("#FF6B6B")

PDF_PRODUCT_COLUMNS = ["Name", "Category", "Sell price", "Stock", "Min stock", "Expiration date"]
PDF_SALE_COLUMNS = ["Date", "Product", "Quantity", "Total price", "Payment", "Delivery", "Seller"]


def _base_table_style(font_size: int) -> list[tuple]:
    return [
        ("FONTSIZE", (0, 0), (-1, -1), font_size),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 0), (-1, 0), PDF_HEADER_COLOR),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]


def product_pdf_styles(products: list[Product]) -> list[tuple]:
    """Expiring rows in yellow, low stock cells in red; row 0 is the header."""
    stock_col = PDF_PRODUCT_COLUMNS.index("Stock")
    style = _base_table_style(8)
    for row, p in enumerate(products, start=1):
        if p.is_expiring:
            style.append(("BACKGROUND", (0, row), (-1, row), PDF_EXPIRING_COLOR))
        if p.is_low_stock:
            style.append(("BACKGROUND", (stock_col, row), (stock_col, row), PDF_LOW_STOCK_COLOR))
    return style


def sale_pdf_rows(sales: list[Sale]) -> list[list]:
    rows = [
        [
            s.created_at.strftime("%Y-%m-%d") if s.created_at else "", s.product_name, str(s.quantity),
            f"{s.total_price:.2f}", s.payment_method.value, s.delivery_type.value, s.seller_name,
        ]
        for s in sales
    ]
    rows.append([
        "TOTAL", "", str(sum(s.quantity for s in sales)),
        f"{round(sum(s.total_price for s in sales), 2):.2f}", "", "", "",
    ])
    return rows


def _render_pdf(title: str, subtitle: str, header: list[str], rows: list[list], style: list[tuple]) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4), title=title)
    styles = getSampleStyleSheet()
    table = Table([header] + rows, repeatRows=1)
    table.setStyle(TableStyle(style))
    doc.build([
        Paragraph(title, styles["Title"]),
        Paragraph(subtitle, styles["Normal"]),
        Spacer(1, 12),
        table,
    ])
    return buf.getvalue()


def products_pdf(products: list[Product]) -> bytes:
    rows = [
        [
            p.name, p.category, f"{p.sell_price:.2f}", str(p.stock), str(p.min_stock),
            p.expiration_date.isoformat() if p.expiration_date else "-",
        ]
        for p in products
    ]
    return _render_pdf(
        "Product list", f"Date: {date.today().isoformat()}", PDF_PRODUCT_COLUMNS, rows, product_pdf_styles(products)
    )


def sales_pdf(sales: list[Sale], start: date | None = None, end: date | None = None) -> bytes:
    subtitle = f"Date: {date.today().isoformat()}"
    if start or end:
        subtitle += f" ({start or '...'} - {end or '...'})"
    rows = sale_pdf_rows(sales)
    style = _base_table_style(7)
    last = len(rows)
    style += [
        ("FONTNAME", (0, last), (-1, last), "Helvetica-Bold"),
        ("BACKGROUND", (0, last), (-1, last), PDF_SUMMARY_COLOR),
    ]
    return _render_pdf("Sales report", subtitle, PDF_SALE_COLUMNS, rows, style)
