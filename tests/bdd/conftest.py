"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from commerce.inventory import ledger
from commerce.shared.errors import InsufficientStock


@pytest.fixture()
def error():
    """Container for the exception raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def placed():
    return {"order": None}


@given(
    parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'),
    target_fixture="product",
)
def product_in_stock(name, price, stock):
    return ledger.register_product(name=name, price=price, actor_id="staff-1", stock=stock)


@then("the cart action fails with insufficient stock")
def cart_action_fails(error):
    assert isinstance(error["exc"], InsufficientStock), f"Expected InsufficientStock, got {error['exc']!r}"


@then("the order fails with insufficient stock")
def order_fails(error):
    assert isinstance(error["exc"], InsufficientStock), f"Expected InsufficientStock, got {error['exc']!r}"


@then("the status change fails with a validation error")
def status_change_fails(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("the product has {stock:d} in stock"))
def product_stock_is(product, stock):
    assert ledger.get_product(product.id).stock == stock
