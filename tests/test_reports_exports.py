import csv
import io
from datetime import date, timedelta

from openpyxl import load_workbook

from salon_pos.services import export_service, ledger_service, product_service, report_service, sales_service


def test_inventory_summary(db, make_product):
    make_product(name="Shampoo", category="Hair care", stock=10, buy_price=6.0, sell_price=12.5, min_stock=2)
    make_product(name="Nail Polish", category="Nails", stock=1, buy_price=2.0, sell_price=5.0, min_stock=3)
    make_product(name="Toner", category="Skin", stock=4, expiration_date=date.today() - timedelta(days=3))

    summary = report_service.inventory_summary(db)

    assert summary["total_products"] == 3
    assert summary["total_units_in_stock"] == 15
    assert summary["total_cost_value"] == 10 * 6.0 + 1 * 2.0 + 4 * 6.0
    assert summary["total_retail_value"] == 10 * 12.5 + 1 * 5.0 + 4 * 12.5
    assert summary["low_stock_count"] == 1
    assert summary["low_stock_items"][0]["name"] == "Nail Polish"
    assert summary["expired_count"] == 1
    assert summary["expiring_count"] == 0
    assert {c["category"] for c in summary["by_category"]} == {"Hair care", "Nails", "Skin"}


def test_sales_stats_breakdown(db, make_product, seller, other_seller):
    product = make_product(stock=20, sell_price=10.0)
    sales_service.record_sale(db, product.id, 2, "cash", "pickup", seller.id)
    sales_service.record_sale(db, product.id, 1, "card", "pickup", seller.id)
    sales_service.record_sale(db, product.id, 3, "cash", "delivery", other_seller.id)

    stats = report_service.sales_stats(db)

    assert stats["total_sales"] == 3
    assert stats["total_quantity"] == 6
    assert stats["total_revenue"] == 60.0
    by_method = {row["key"]: row for row in stats["by_payment_method"]}
    assert by_method["cash"]["count"] == 2
    assert by_method["cash"]["revenue"] == 50.0
    by_delivery = {row["key"]: row["count"] for row in stats["by_delivery_type"]}
    assert by_delivery == {"delivery": 1, "pickup": 2}

    own = report_service.sales_stats(db, user_id=seller.id)
    assert own["total_sales"] == 2
    assert own["total_revenue"] == 30.0


def test_sales_stats_without_sales(db):
    stats = report_service.sales_stats(db)

    assert stats["total_sales"] == 0
    assert stats["total_revenue"] == 0.0
    assert stats["by_payment_method"] == []


def test_top_products(db, make_product, seller):
    shampoo = make_product(name="Shampoo", stock=20, sell_price=10.0)
    polish = make_product(name="Nail Polish", stock=20, sell_price=4.0)
    sales_service.record_sale(db, shampoo.id, 2, "cash", "pickup", seller.id)
    sales_service.record_sale(db, polish.id, 5, "cash", "pickup", seller.id)

    top = report_service.top_products(db, limit=5)

    assert [row["name"] for row in top] == ["Nail Polish", "Shampoo"]
    assert top[0]["total_sold"] == 5
    assert top[0]["total_revenue"] == 20.0


def test_sales_csv_has_total_row(db, make_product, seller):
    product = make_product(stock=10, sell_price=12.5)
    sales_service.record_sale(db, product.id, 2, "cash", "pickup", seller.id)
    sales_service.record_sale(db, product.id, 1, "card", "delivery", seller.id)

    rows = list(csv.reader(io.StringIO(export_service.sales_csv(sales_service.list_sales(db).all()))))

    assert rows[0][:4] == ["Date", "Product", "Category", "Quantity"]
    assert len(rows) == 4
    assert rows[1][1] == "Argan Oil Shampoo"
    assert rows[1][8] == "Seller One"
    assert rows[-1][0] == "TOTAL"
    assert rows[-1][3] == "3"
    assert float(rows[-1][5]) == 37.5


def test_movements_csv(db, make_product, seller):
    product = make_product(stock=10)
    sales_service.record_sale(db, product.id, 4, "cash", "pickup", seller.id)

    rows = list(csv.DictReader(io.StringIO(export_service.movements_csv(ledger_service.list_movements(db)))))

    assert [(r["Type"], r["Quantity"], r["Balance after"]) for r in rows] == [("out", "4", "6"), ("in", "10", "10")]


def test_products_xlsx_highlights_low_stock(db, make_product):
    make_product(name="Nail Polish", stock=1, min_stock=3)
    make_product(name="Shampoo", stock=10, min_stock=2)

    wb = load_workbook(io.BytesIO(export_service.products_xlsx(product_service.list_products(db))))
    ws = wb.active

    assert ws.title == "Products"
    assert [c.value for c in ws[1]][:3] == ["Name", "Category", "Brand"]
    assert ws["A2"].value == "Nail Polish"
    assert ws["F2"].fill.fgColor.rgb == export_service.LOW_STOCK_FILL.fgColor.rgb
    assert ws["F3"].fill.fgColor.rgb != export_service.LOW_STOCK_FILL.fgColor.rgb


def test_sales_xlsx_summary_row(db, make_product, seller):
    product = make_product(stock=10, sell_price=5.0)
    sales_service.record_sale(db, product.id, 3, "transfer", "pickup", seller.id)

    ws = load_workbook(io.BytesIO(export_service.sales_xlsx(sales_service.list_sales(db).all()))).active

    assert ws.max_row == 3
    assert ws.cell(row=3, column=1).value == "TOTAL"
    assert ws.cell(row=3, column=6).value == 15.0
    assert ws.cell(row=3, column=1).font.bold


def test_export_filename():
    assert export_service.export_filename("sales", "csv") == f"sales_{date.today().isoformat()}.csv"


def test_products_pdf_highlights_expiring_and_low_stock(db, make_product):
    make_product(name="Hair Dye", stock=10, min_stock=2, expiration_date=date.today() + timedelta(days=20))
    make_product(name="Nail Polish", stock=1, min_stock=3)
    products = product_service.list_products(db)

    style = export_service.product_pdf_styles(products)
    backgrounds = [(cmd[1], cmd[2], cmd[3]) for cmd in style if cmd[0] == "BACKGROUND"]

    assert ((0, 1), (-1, 1), export_service.PDF_EXPIRING_COLOR) in backgrounds
    assert ((3, 2), (3, 2), export_service.PDF_LOW_STOCK_COLOR) in backgrounds
    assert ((0, 2), (-1, 2), export_service.PDF_EXPIRING_COLOR) not in backgrounds
    assert export_service.products_pdf(products).startswith(b"%PDF")


def test_sales_pdf_has_total_row(db, make_product, seller):
    product = make_product(stock=10, sell_price=12.5)
    sales_service.record_sale(db, product.id, 2, "cash", "pickup", seller.id)
    sales = sales_service.list_sales(db).all()

    rows = export_service.sale_pdf_rows(sales)

    assert rows[0][1] == "Argan Oil Shampoo"
    assert rows[0][6] == "Seller One"
    assert rows[-1] == ["TOTAL", "", "2", "25.00", "", "", ""]
    assert export_service.sales_pdf(sales, start=date.today()).startswith(b"%PDF")
