"""Tests for the Product aggregate's stock counter."""

import pytest
from protean.exceptions import ValidationError

from commerce.inventory.events import ProductDetailsUpdated, ProductRegistered, StockAdjusted
from commerce.inventory.product import Product, StockChangeReason
from commerce.shared.errors import InsufficientStock


def _product(stock=0):
    product = Product.register(name="Stretch Film", price=12.5, category="Packaging")
    if stock:
        product.adjust_stock(stock, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
    product._events.clear()
    return product


class TestProductRegistration:
    def test_register_starts_without_stock(self):
        product = Product.register(name="Stretch Film", price=12.5)
        assert product.stock == 0
        assert product.stock_version == 0

    def test_register_rounds_price(self):
        product = Product.register(name="Stretch Film", price=12.499)
        assert product.price == 12.5

    def test_register_raises_event(self):
        product = Product.register(name="Stretch Film", price=12.5, category="Packaging")
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductRegistered)
        assert event.name == "Stretch Film"
        assert event.category == "Packaging"


class TestAdjustStock:
    def test_increase(self):
        product = _product()
        new_stock = product.adjust_stock(5, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
        assert new_stock == 5
        assert product.stock == 5

    def test_each_change_bumps_version(self):
        product = _product(stock=5)
        version = product.stock_version
        product.adjust_stock(-2, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
        product.adjust_stock(1, StockChangeReason.RETURN, actor_id="admin-1")
        assert product.stock_version == version + 2

    def test_decrease_to_zero_is_allowed(self):
        product = _product(stock=3)
        product.adjust_stock(-3, StockChangeReason.ORDER, actor_id="acct-1", order_id="ord-1")
        assert product.stock == 0

    def test_decrease_below_zero_fails(self):
        product = _product(stock=3)
        with pytest.raises(InsufficientStock) as exc:
            product.adjust_stock(-4, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
        assert exc.value.available == 3
        assert exc.value.requested == 4
        assert "Stretch Film" in str(exc.value)

    def test_failed_decrease_leaves_product_untouched(self):
        product = _product(stock=3)
        version = product.stock_version
        with pytest.raises(InsufficientStock):
            product.adjust_stock(-4, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
        assert product.stock == 3
        assert product.stock_version == version
        assert product._events == []

    def test_zero_change_rejected(self):
        product = _product(stock=3)
        with pytest.raises(ValidationError) as exc:
            product.adjust_stock(0, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")
        assert "non-zero" in str(exc.value)

    def test_fractional_change_rejected(self):
        product = _product(stock=3)
        with pytest.raises(ValidationError):
            product.adjust_stock(1.5, StockChangeReason.MANUAL_ADJUSTMENT, actor_id="admin-1")

    def test_unknown_reason_rejected_before_change(self):
        product = _product(stock=3)
        with pytest.raises(ValidationError) as exc:
            product.adjust_stock(2, "shrinkage", actor_id="admin-1")
        assert "shrinkage" in str(exc.value)
        assert product.stock == 3

    def test_reason_accepts_plain_string(self):
        product = _product(stock=3)
        product.adjust_stock(2, "return", actor_id="admin-1")
        assert product.stock == 5

    def test_raises_stock_adjusted_event(self):
        product = _product(stock=3)
        product.adjust_stock(-2, StockChangeReason.ORDER, actor_id="acct-1", order_id="ord-1")
        event = product._events[-1]
        assert isinstance(event, StockAdjusted)
        assert event.change == -2
        assert event.previous_stock == 3
        assert event.new_stock == 1
        assert event.reason == "order"
        assert event.order_id == "ord-1"


class TestAvailability:
    def test_available_within_stock(self):
        assert _product(stock=3).is_available(3)

    def test_unavailable_beyond_stock(self):
        assert not _product(stock=3).is_available(4)

    def test_non_positive_quantity_is_unavailable(self):
        assert not _product(stock=3).is_available(0)


class TestUpdateDetails:
    def test_partial_update_keeps_other_fields(self):
        product = _product(stock=3)
        product.update_details(price=15.0)
        assert product.price == 15.0
        assert product.name == "Stretch Film"
        assert product.stock == 3

    def test_negative_price_rejected(self):
        product = _product()
        with pytest.raises(ValidationError):
            product.update_details(price=-1)

    def test_raises_details_updated_event(self):
        product = _product()
        product.update_details(name="Stretch Film 23mu")
        assert isinstance(product._events[-1], ProductDetailsUpdated)
        assert product._events[-1].name == "Stretch Film 23mu"
