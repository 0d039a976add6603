"""Application tests for the cart store."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from commerce.cart import store
from commerce.cart.cart import MergeMode, ShoppingCart
from commerce.shared.errors import InsufficientStock


class TestGet:
    def test_creates_empty_cart(self):
        cart = store.get("acct-1")
        assert len(cart.items) == 0
        assert cart.total_items == 0

    def test_is_idempotent(self):
        first = store.get("acct-1")
        second = store.get("acct-1")
        assert first.id == second.id
        assert len(current_domain.repository_for(ShoppingCart)._dao.query.all().items) == 1

    def test_one_cart_per_account(self):
        assert store.get("acct-1").id != store.get("acct-2").id


class TestAddItem:
    def test_persists_line(self, make_product):
        product = make_product(price=9.99, stock=10)
        store.add_item("acct-1", product.id, 3)
        cart = store.get("acct-1")
        assert cart.items[0].quantity == 3
        assert cart.total_items == 3
        assert cart.total_price == 29.97

    def test_defaults_to_one(self, make_product):
        product = make_product()
        cart = store.add_item("acct-1", product.id)
        assert cart.items[0].quantity == 1

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            store.add_item("acct-1", "prod-missing", 1)

    def test_exceeding_stock_leaves_cart_unchanged(self, make_product):
        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 3)
        with pytest.raises(InsufficientStock):
            store.add_item("acct-1", product.id, 8)
        assert store.get("acct-1").items[0].quantity == 3

    def test_quantity_must_be_whole(self, make_product):
        product = make_product()
        with pytest.raises(ValidationError):
            store.add_item("acct-1", product.id, 1.5)

    def test_does_not_touch_stock(self, make_product):
        from commerce.inventory import ledger

        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 4)
        assert ledger.get_product(product.id).stock == 10


class TestSetItemQuantity:
    def test_updates(self, make_product):
        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 3)
        cart = store.set_item_quantity("acct-1", product.id, 10)
        assert cart.items[0].quantity == 10
        assert cart.total_items == 10

    def test_zero_removes(self, make_product):
        product = make_product()
        store.add_item("acct-1", product.id, 3)
        cart = store.set_item_quantity("acct-1", product.id, 0)
        assert len(cart.items) == 0

    def test_not_in_cart(self, make_product):
        product = make_product()
        with pytest.raises(ObjectNotFoundError):
            store.set_item_quantity("acct-1", product.id, 2)

    def test_beyond_stock(self, make_product):
        product = make_product(stock=5)
        store.add_item("acct-1", product.id, 1)
        with pytest.raises(InsufficientStock):
            store.set_item_quantity("acct-1", product.id, 6)


class TestRemoveAndClear:
    def test_remove(self, make_product):
        tape = make_product(name="Tape", price=2.0)
        labels = make_product(name="Labels", price=1.0)
        store.add_item("acct-1", tape.id, 1)
        store.add_item("acct-1", labels.id, 2)
        cart = store.remove_item("acct-1", tape.id)
        assert [item.name for item in cart.items] == ["Labels"]
        assert cart.total_price == 2.0

    def test_remove_absent_is_noop(self):
        cart = store.remove_item("acct-1", "prod-missing")
        assert len(cart.items) == 0

    def test_clear(self, make_product):
        product = make_product()
        store.add_item("acct-1", product.id, 2)
        cart = store.clear("acct-1")
        assert len(cart.items) == 0
        assert cart.total_items == 0
        assert cart.total_price == 0.0


class TestMerge:
    def test_default_mode_replaces(self, make_product, monkeypatch):
        monkeypatch.delenv("COMMERCE_CART_MERGE_MODE", raising=False)
        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 2)
        cart = store.merge("acct-1", [{"product_id": product.id, "quantity": 5}])
        assert cart.items[0].quantity == 5

    def test_add_mode(self, make_product):
        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 2)
        cart = store.merge("acct-1", [{"product_id": product.id, "quantity": 5}], mode=MergeMode.ADD)
        assert cart.items[0].quantity == 7

    def test_mode_from_environment(self, make_product, monkeypatch):
        monkeypatch.setenv("COMMERCE_CART_MERGE_MODE", "add")
        product = make_product(stock=10)
        store.add_item("acct-1", product.id, 2)
        cart = store.merge("acct-1", [{"product_id": product.id, "quantity": 1}])
        assert cart.items[0].quantity == 3

    def test_clamps_and_skips(self, make_product):
        scarce = make_product(name="Scarce", stock=2)
        gone = make_product(name="Gone", stock=0)
        cart = store.merge(
            "acct-1",
            [
                {"product_id": scarce.id, "quantity": 9},
                {"product_id": gone.id, "quantity": 1},
                {"product_id": "prod-missing", "quantity": 1},
            ],
        )
        assert [(item.name, item.quantity) for item in cart.items] == [("Scarce", 2)]
        assert cart.total_items == 2

    def test_creates_cart_when_absent(self, make_product):
        product = make_product(stock=10)
        cart = store.merge("acct-new", [{"product_id": product.id, "quantity": 1}])
        assert str(cart.account_id) == "acct-new"

    def test_items_must_be_a_list(self):
        with pytest.raises(ValidationError):
            store.merge("acct-1", "not-a-list")
