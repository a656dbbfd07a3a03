import logging

from sqlalchemy.orm import Session

from salon_pos.exceptions import ValidationError
from salon_pos.models.stock_movement import MovementType, StockMovement
from salon_pos.services import ledger_service, product_service
from salon_pos.services.concurrency import run_atomic
from salon_pos.validation import coerce_choice, require_positive_int, require_text

logger = logging.getLogger(__name__)

ADJUSTMENT_TYPES = (MovementType.IN, MovementType.OUT)


def record_adjustment(
    db: Session,
    product_id: str,
    movement_type: MovementType | str,
    quantity: int,
    reason: str,
    user_id: str | None = None,
) -> StockMovement:
    """Admin stock correction (delivery received, damage, recount, ...)."""
    movement_type = coerce_choice(MovementType, movement_type, "movement type")
    if movement_type not in ADJUSTMENT_TYPES:
        raise ValidationError("Adjustments must be of type 'in' or 'out'; record returns as returns")
    require_positive_int(quantity)
    reason = require_text(reason, "Adjustment reason")

    delta = quantity if movement_type == MovementType.IN else -quantity

    def _op() -> StockMovement:
        product = product_service.load_for_update(db, product_id)
        product_service.adjust_stock(product, delta)
        db.flush()
        movement = ledger_service.append(
            db,
            product,
            movement_type,
            quantity,
            reason,
            user_id=user_id,
        )
        db.commit()
        db.refresh(movement)
        logger.info("Adjustment on %s: %+d (%s), stock now %d", product.id, delta, reason, movement.balance_after)
        return movement

    return run_atomic(db, _op, product_id=product_id)
