from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from salon_pos.models.product import Product
from salon_pos.models.sale import Sale
from salon_pos.services import ledger_service


def inventory_summary(db: Session) -> dict:
    products = db.query(Product).filter(Product.active.is_(True)).order_by(Product.name).all()
    low_stock = [p for p in products if p.is_low_stock]
    expiring = [p for p in products if p.is_expiring and not p.is_expired]
    expired = [p for p in products if p.is_expired]

    return {
        "total_products": len(products),
        "total_units_in_stock": sum(p.stock for p in products),
        "total_cost_value": round(sum(p.stock * p.buy_price for p in products), 2),
        "total_retail_value": round(sum(p.stock * p.sell_price for p in products), 2),
        "low_stock_count": len(low_stock),
        "low_stock_items": [
            {"id": p.id, "name": p.name, "stock": p.stock, "min_stock": p.min_stock} for p in low_stock
        ],
        "expiring_count": len(expiring),
        "expired_count": len(expired),
        "by_category": _group_by_category(products),
    }


def _group_by_category(products: list[Product]) -> list[dict]:
    cats: dict[str, dict] = {}
    for p in products:
        cat = p.category or "Uncategorized"
        if cat not in cats:
            cats[cat] = {"category": cat, "product_count": 0, "total_units": 0, "total_value": 0.0}
        cats[cat]["product_count"] += 1
        cats[cat]["total_units"] += p.stock
        cats[cat]["total_value"] += p.stock * p.sell_price
    for v in cats.values():
        v["total_value"] = round(v["total_value"], 2)
    return list(cats.values())


def _filtered_sales(q, start: datetime | None, end: datetime | None, user_id: str | None):
    if start:
        q = q.filter(Sale.created_at >= start)
    if end:
        q = q.filter(Sale.created_at <= end)
    if user_id:
        q = q.filter(Sale.user_id == user_id)
    return q


def sales_stats(
    db: Session,
    start: datetime | None = None,
    end: datetime | None = None,
    user_id: str | None = None,
) -> dict:
    count, quantity, revenue = _filtered_sales(
        db.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.quantity), 0),
            func.coalesce(func.sum(Sale.total_price), 0.0),
        ),
        start, end, user_id,
    ).one()

    def _breakdown(column) -> list[dict]:
        rows = (
            _filtered_sales(
                db.query(column, func.count(Sale.id), func.coalesce(func.sum(Sale.total_price), 0.0)),
                start, end, user_id,
            )
            .group_by(column)
            .order_by(column)
            .all()
        )
        return [
            {"key": key.value if hasattr(key, "value") else str(key), "count": n, "revenue": round(float(total), 2)}
            for key, n, total in rows
        ]

    return {
        "total_sales": int(count),
        "total_quantity": int(quantity),
        "total_revenue": round(float(revenue), 2),
        "by_payment_method": _breakdown(Sale.payment_method),
        "by_delivery_type": _breakdown(Sale.delivery_type),
    }


def top_products(db: Session, limit: int = 10) -> list[dict]:
    results = (
        db.query(
            Sale.product_id,
            func.max(Sale.product_name).label("product_name"),
            func.sum(Sale.quantity).label("total_sold"),
            func.sum(Sale.total_price).label("total_revenue"),
        )
        .group_by(Sale.product_id)
        .order_by(func.sum(Sale.quantity).desc())
        .limit(limit)
        .all()
    )

    return [
        {
            "product_id": r.product_id,
            "name": r.product_name,
            "total_sold": int(r.total_sold),
            "total_revenue": round(float(r.total_revenue), 2),
        }
        for r in results
    ]


def ledger_check(db: Session) -> list[dict]:
    """Compare every product's stock with the replay of its movements."""
    replayed = ledger_service.replay_all(db)
    products = db.query(Product).order_by(Product.name).all()
    return [
        {
            "product_id": p.id,
            "name": p.name,
            "stock": p.stock,
            "ledger_stock": replayed.get(p.id, 0),
            "consistent": p.stock == replayed.get(p.id, 0),
        }
        for p in products
    ]
