import logging

import pytest

from salon_pos.exceptions import InsufficientStockError, NotFoundError, ValidationError
from salon_pos.models.product_return import ProductReturn
from salon_pos.models.stock_movement import MovementType
from salon_pos.services import ledger_service, product_service, return_service, sales_service, stock_service


class TestReturns:
    def test_return_increments_stock_and_appends_return_movement(self, db, make_product, admin):
        product = make_product(stock=6)

        record = return_service.record_return(db, product.id, 2, "defective", admin.id)

        assert record.quantity == 2
        assert record.reason == "defective"
        assert product_service.get_product(db, product.id).stock == 8
        latest = ledger_service.list_movements(db, product_id=product.id).first()
        assert latest.type == MovementType.RETURN
        assert latest.quantity == 2
        assert latest.reason == "return: defective"
        assert latest.reference_id == record.id
        assert latest.balance_after == 8

    def test_returns_are_not_bounded_by_sales(self, db, make_product, admin):
        product = make_product(stock=0)

        return_service.record_return(db, product.id, 50, "found in back room", admin.id)

        assert product_service.get_product(db, product.id).stock == 50

    def test_return_requires_reason(self, db, make_product, admin):
        product = make_product()

        with pytest.raises(ValidationError):
            return_service.record_return(db, product.id, 1, "  ", admin.id)
        assert db.query(ProductReturn).count() == 0

    def test_return_requires_positive_quantity(self, db, make_product, admin):
        product = make_product()

        with pytest.raises(ValidationError):
            return_service.record_return(db, product.id, 0, "defective", admin.id)

    def test_return_of_unknown_product(self, db, admin):
        with pytest.raises(NotFoundError):
            return_service.record_return(db, "missing", 1, "defective", admin.id)

    def test_return_linked_to_sale(self, db, make_product, admin, seller):
        product = make_product(stock=10)
        sale = sales_service.record_sale(db, product.id, 3, "cash", "pickup", seller.id)

        record = return_service.record_return(db, product.id, 1, "wrong shade", admin.id, sale_id=sale.id)

        assert record.sale_id == sale.id
        assert product_service.get_product(db, product.id).stock == 8

    def test_return_against_sale_of_other_product(self, db, make_product, admin, seller):
        shampoo = make_product(name="Shampoo")
        polish = make_product(name="Nail Polish")
        sale = sales_service.record_sale(db, shampoo.id, 1, "cash", "pickup", seller.id)

        with pytest.raises(ValidationError):
            return_service.record_return(db, polish.id, 1, "defective", admin.id, sale_id=sale.id)
        assert product_service.get_product(db, polish.id).stock == 10

    def test_return_against_unknown_sale(self, db, make_product, admin):
        product = make_product()

        with pytest.raises(NotFoundError):
            return_service.record_return(db, product.id, 1, "defective", admin.id, sale_id="nope")

    def test_return_above_sold_quantity_is_logged(self, db, make_product, admin, seller, caplog):
        product = make_product(stock=10)
        sale = sales_service.record_sale(db, product.id, 1, "cash", "pickup", seller.id)

        with caplog.at_level(logging.WARNING, logger="salon_pos.services.return_service"):
            return_service.record_return(db, product.id, 4, "bulk return", admin.id, sale_id=sale.id)

        assert "exceeds quantity" in caplog.text
        assert product_service.get_product(db, product.id).stock == 13


class TestAdjustments:
    def test_in_adjustment(self, db, make_product, admin):
        product = make_product(stock=8)

        movement = stock_service.record_adjustment(db, product.id, "in", 12, "supplier delivery", admin.id)

        assert movement.type == MovementType.IN
        assert movement.quantity == 12
        assert movement.balance_after == 20
        assert movement.user_id == admin.id
        assert product_service.get_product(db, product.id).stock == 20

    def test_out_adjustment(self, db, make_product, admin):
        product = make_product(stock=8)

        movement = stock_service.record_adjustment(db, product.id, MovementType.OUT, 3, "damage", admin.id)

        assert movement.type == MovementType.OUT
        assert movement.reason == "damage"
        assert product_service.get_product(db, product.id).stock == 5

    def test_out_adjustment_beyond_stock(self, db, make_product, admin):
        product = make_product(stock=8)

        with pytest.raises(InsufficientStockError):
            stock_service.record_adjustment(db, product.id, "out", 20, "damage", admin.id)

        assert product_service.get_product(db, product.id).stock == 8
        assert ledger_service.list_movements(db, product_id=product.id).count() == 1

    def test_return_type_is_not_an_adjustment(self, db, make_product, admin):
        product = make_product()

        with pytest.raises(ValidationError):
            stock_service.record_adjustment(db, product.id, "return", 1, "recount", admin.id)

    @pytest.mark.parametrize("movement_type", ["sideways", ""])
    def test_unknown_type(self, db, make_product, admin, movement_type):
        product = make_product()

        with pytest.raises(ValidationError):
            stock_service.record_adjustment(db, product.id, movement_type, 1, "recount", admin.id)

    def test_adjustment_requires_reason(self, db, make_product, admin):
        product = make_product()

        with pytest.raises(ValidationError):
            stock_service.record_adjustment(db, product.id, "in", 1, "", admin.id)
