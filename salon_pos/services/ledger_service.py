from datetime import datetime

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from salon_pos.models.product import Product
from salon_pos.models.stock_movement import MovementType, StockMovement


def append(
    db: Session,
    product: Product,
    movement_type: MovementType,
    quantity: int,
    reason: str,
    user_id: str | None = None,
    reference_id: str = "",
) -> StockMovement:
    """Record one movement inside the caller's transaction.

    ``product.stock`` must already hold the post-change value; it is stored as
    ``balance_after``. Nothing is committed here.
    """
    movement = StockMovement(
        product_id=product.id,
        user_id=user_id,
        type=movement_type,
        quantity=quantity,
        reason=reason,
        reference_id=reference_id,
        balance_after=product.stock,
    )
    db.add(movement)
    db.flush()
    return movement


def list_movements(
    db: Session,
    product_id: str | None = None,
    movement_type: MovementType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Query:
    """Newest first; entries sharing a timestamp keep their insertion order reversed.

    Returns the un-executed query: iterating it runs it, iterating again re-runs it.
    """
    q = db.query(StockMovement)
    if product_id:
        q = q.filter(StockMovement.product_id == product_id)
    if movement_type:
        q = q.filter(StockMovement.type == movement_type)
    if start:
        q = q.filter(StockMovement.created_at >= start)
    if end:
        q = q.filter(StockMovement.created_at <= end)
    return q.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())


_signed_quantity = case(
    (StockMovement.type == MovementType.OUT, -StockMovement.quantity),
    else_=StockMovement.quantity,
)


def replay(db: Session, product_id: str) -> int:
    """Stock level obtained by summing every signed movement of a product from zero."""
    total = (
        db.query(func.coalesce(func.sum(_signed_quantity), 0))
        .filter(StockMovement.product_id == product_id)
        .scalar()
    )
    return int(total)


def replay_all(db: Session) -> dict[str, int]:
    rows = (
        db.query(StockMovement.product_id, func.sum(_signed_quantity))
        .group_by(StockMovement.product_id)
        .all()
    )
    return {product_id: int(total) for product_id, total in rows}
