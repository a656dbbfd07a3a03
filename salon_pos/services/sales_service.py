import logging
from datetime import datetime

from sqlalchemy.orm import Query, Session

from salon_pos.exceptions import ExpiredProductError
from salon_pos.models.sale import DeliveryType, PaymentMethod, Sale
from salon_pos.models.stock_movement import MovementType
from salon_pos.services import ledger_service, product_service
from salon_pos.services.concurrency import run_atomic
from salon_pos.validation import coerce_choice, require_positive_int, require_text

logger = logging.getLogger(__name__)

SALE_REASON = "sale"


def record_sale(
    db: Session,
    product_id: str,
    quantity: int,
    payment_method: PaymentMethod | str,
    delivery_type: DeliveryType | str,
    seller_id: str,
) -> Sale:
    """Sell ``quantity`` units: decrement stock, insert the sale, append an ``out`` movement.

    All three writes commit together. Calling this twice records two sales.
    """
    require_positive_int(quantity)
    require_text(seller_id, "Seller")
    payment_method = coerce_choice(PaymentMethod, payment_method, "payment method")
    delivery_type = coerce_choice(DeliveryType, delivery_type, "delivery type")

    def _op() -> Sale:
        product = product_service.load_for_update(db, product_id)
        if product.is_expired:
            logger.info("Rejected sale of expired product %s (expired %s)", product.id, product.expiration_date)
            raise ExpiredProductError(f"Product {product.name} expired on {product.expiration_date}")

        unit_price = product.sell_price
        product_service.adjust_stock(product, -quantity)

        sale = Sale(
            product_id=product.id,
            user_id=seller_id,
            product_name=product.name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=round(unit_price * quantity, 2),
            payment_method=payment_method,
            delivery_type=delivery_type,
        )
        db.add(sale)
        db.flush()

        ledger_service.append(
            db,
            product,
            MovementType.OUT,
            quantity,
            SALE_REASON,
            user_id=seller_id,
            reference_id=sale.id,
        )
        db.commit()
        db.refresh(sale)
        logger.info("Sale %s: %d x %s, stock now %d", sale.id, quantity, product.id, product.stock)
        return sale

    return run_atomic(db, _op, product_id=product_id)


def get_sale(db: Session, sale_id: str) -> Sale | None:
    return db.query(Sale).filter(Sale.id == sale_id).first()


def list_sales(
    db: Session,
    start: datetime | None = None,
    end: datetime | None = None,
    user_id: str | None = None,
    product_id: str | None = None,
) -> Query:
    q = db.query(Sale)
    if start:
        q = q.filter(Sale.created_at >= start)
    if end:
        q = q.filter(Sale.created_at <= end)
    if user_id:
        q = q.filter(Sale.user_id == user_id)
    if product_id:
        q = q.filter(Sale.product_id == product_id)
    return q.order_by(Sale.created_at.desc())
