import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from salon_pos.config import settings
from salon_pos.exceptions import InsufficientStockError, NotFoundError, ValidationError
from salon_pos.models.product import Product
from salon_pos.models.product_return import ProductReturn
from salon_pos.models.sale import Sale
from salon_pos.models.stock_movement import MovementType
from salon_pos.schemas.product import ProductCreate, ProductUpdate
from salon_pos.services import ledger_service
from salon_pos.services.concurrency import lock_for_update, run_atomic

logger = logging.getLogger(__name__)

INITIAL_STOCK_REASON = "initial stock"
MANUAL_EDIT_REASON = "manual edit"

REQUIRED_TEXT_FIELDS = ("name", "category")
NUMERIC_FIELDS = ("buy_price", "sell_price", "stock", "min_stock")
NON_NULLABLE_FIELDS = REQUIRED_TEXT_FIELDS + NUMERIC_FIELDS + ("brand", "description")


def _validate_fields(fields: dict) -> None:
    for field in NON_NULLABLE_FIELDS:
        if field in fields and fields[field] is None:
            raise ValidationError(f"Product {field} cannot be empty")
    for field in REQUIRED_TEXT_FIELDS:
        if field in fields and not fields[field].strip():
            raise ValidationError(f"Product {field} is required")
    for field in NUMERIC_FIELDS:
        if field in fields and fields[field] < 0:
            raise ValidationError(f"Product {field} cannot be negative")


def create_product(db: Session, data: ProductCreate, user_id: str | None = None) -> Product:
    fields = data.model_dump()
    _validate_fields(fields)

    def _op() -> Product:
        product = Product(
            name=data.name.strip(),
            category=data.category.strip(),
            brand=data.brand,
            buy_price=data.buy_price,
            sell_price=data.sell_price,
            stock=data.stock,
            min_stock=data.min_stock,
            expiration_date=data.expiration_date,
            barcode=data.barcode or None,
            description=data.description,
        )
        db.add(product)
        db.flush()

        if data.stock > 0:
            ledger_service.append(
                db,
                product,
                MovementType.IN,
                data.stock,
                INITIAL_STOCK_REASON,
                user_id=user_id,
            )

        db.commit()
        db.refresh(product)
        return product

    product = run_atomic(db, _op)
    logger.info("Created product %s (%s) with stock %d", product.id, product.name, product.stock)
    return product


def get_product(db: Session, product_id: str, include_inactive: bool = False) -> Product:
    q = db.query(Product).filter(Product.id == product_id)
    if not include_inactive:
        q = q.filter(Product.active.is_(True))
    product = q.first()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def list_products(db: Session, category: str | None = None, include_inactive: bool = False) -> list[Product]:
    q = db.query(Product)
    if not include_inactive:
        q = q.filter(Product.active.is_(True))
    if category:
        q = q.filter(Product.category == category)
    return q.order_by(Product.name.asc(), Product.id.asc()).all()


def get_low_stock(db: Session) -> list[Product]:
    return (
        db.query(Product)
        .filter(Product.active.is_(True), Product.stock <= Product.min_stock)
        .order_by(Product.stock.asc(), Product.name.asc())
        .all()
    )


def get_expiring(db: Session, days: int | None = None) -> list[Product]:
    """Products whose expiration date falls within the warning window but has not passed."""
    today = date.today()
    horizon = today + timedelta(days=settings.EXPIRY_WARNING_DAYS if days is None else days)
    return (
        db.query(Product)
        .filter(
            Product.active.is_(True),
            Product.expiration_date.is_not(None),
            Product.expiration_date > today,
            Product.expiration_date <= horizon,
        )
        .order_by(Product.expiration_date.asc())
        .all()
    )


def get_history(db: Session, product_id: str, limit: int = 10, seller_id: str | None = None) -> dict:
    sales = db.query(Sale).filter(Sale.product_id == product_id)
    if seller_id:
        sales = sales.filter(Sale.user_id == seller_id)
    return {
        "recent_sales": sales.order_by(Sale.created_at.desc()).limit(limit).all(),
        "recent_movements": ledger_service.list_movements(db, product_id=product_id).limit(limit).all(),
        "recent_returns": (
            db.query(ProductReturn).filter(ProductReturn.product_id == product_id)
            .order_by(ProductReturn.created_at.desc()).limit(limit).all()
        ),
    }


def load_for_update(db: Session, product_id: str) -> Product:
    """Fresh read of an active product inside the current transaction."""
    product = (
        lock_for_update(db.query(Product).filter(Product.id == product_id, Product.active.is_(True)))
        .populate_existing()
        .first()
    )
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def adjust_stock(product: Product, delta: int) -> int:
    """Apply a signed stock change; only the recorders call this."""
    new_stock = product.stock + delta
    if new_stock < 0:
        logger.info(
            "Rejected stock change on %s: available %d, requested %d",
            product.id, product.stock, -delta,
        )
        raise InsufficientStockError(product.id, available=product.stock, requested=-delta)
    product.stock = new_stock
    return new_stock


def update_product(db: Session, product_id: str, data: ProductUpdate, user_id: str | None = None) -> Product:
    update_data = data.model_dump(exclude_unset=True)
    _validate_fields(update_data)
    new_stock = update_data.pop("stock", None)

    def _op() -> Product:
        product = load_for_update(db, product_id)
        for field, value in update_data.items():
            if field in REQUIRED_TEXT_FIELDS:
                value = value.strip()
            setattr(product, field, value)

        if new_stock is not None and new_stock != product.stock:
            difference = new_stock - product.stock
            adjust_stock(product, difference)
            db.flush()
            ledger_service.append(
                db,
                product,
                MovementType.IN if difference > 0 else MovementType.OUT,
                abs(difference),
                MANUAL_EDIT_REASON,
                user_id=user_id,
            )
            logger.info("Manual edit on %s: stock %+d -> %d", product.id, difference, product.stock)

        db.commit()
        db.refresh(product)
        return product

    return run_atomic(db, _op, product_id=product_id)


def delete_product(db: Session, product_id: str) -> None:
    """Soft delete: the product leaves the catalog, its history stays intact."""

    def _op() -> None:
        product = load_for_update(db, product_id)
        product.active = False
        db.commit()

    run_atomic(db, _op, product_id=product_id)
    logger.info("Deleted product %s", product_id)
