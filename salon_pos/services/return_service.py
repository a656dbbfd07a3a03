import logging
from datetime import datetime

from sqlalchemy.orm import Query, Session

from salon_pos.exceptions import NotFoundError, ValidationError
from salon_pos.models.product_return import ProductReturn
from salon_pos.models.sale import Sale
from salon_pos.models.stock_movement import MovementType
from salon_pos.services import ledger_service, product_service
from salon_pos.services.concurrency import run_atomic
from salon_pos.validation import require_positive_int, require_text

logger = logging.getLogger(__name__)


def record_return(
    db: Session,
    product_id: str,
    quantity: int,
    reason: str,
    user_id: str,
    sale_id: str | None = None,
) -> ProductReturn:
    """Take returned units back into stock and book a ``return`` movement.

    The returned quantity is not checked against earlier sales of the product.
    """
    require_positive_int(quantity)
    reason = require_text(reason, "Return reason")

    def _op() -> ProductReturn:
        product = product_service.load_for_update(db, product_id)

        if sale_id:
            sale = db.query(Sale).filter(Sale.id == sale_id).first()
            if not sale:
                raise NotFoundError(f"Sale {sale_id} not found")
            if sale.product_id != product.id:
                raise ValidationError(f"Sale {sale_id} is not a sale of product {product.id}")
            if quantity > sale.quantity:
                logger.warning(
                    "Return of %d exceeds quantity %d of sale %s", quantity, sale.quantity, sale_id
                )

        record = ProductReturn(
            product_id=product.id,
            user_id=user_id,
            sale_id=sale_id,
            quantity=quantity,
            reason=reason,
        )
        db.add(record)
        db.flush()

        product_service.adjust_stock(product, quantity)
        ledger_service.append(
            db,
            product,
            MovementType.RETURN,
            quantity,
            f"return: {reason}",
            user_id=user_id,
            reference_id=record.id,
        )
        db.commit()
        db.refresh(record)
        logger.info("Return %s: %d x %s, stock now %d", record.id, quantity, product.id, product.stock)
        return record

    return run_atomic(db, _op, product_id=product_id)


def list_returns(
    db: Session,
    product_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Query:
    q = db.query(ProductReturn)
    if product_id:
        q = q.filter(ProductReturn.product_id == product_id)
    if start:
        q = q.filter(ProductReturn.created_at >= start)
    if end:
        q = q.filter(ProductReturn.created_at <= end)
    return q.order_by(ProductReturn.created_at.desc())
