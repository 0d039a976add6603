"""Cart Store — per-account cart operations.

Every mutation holds the account's cart lock for the length of its command.
"""

import json

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from commerce.cart.cart import MergeMode, ShoppingCart, coerce_merge_mode, require_quantity
from commerce.cart.items import AddCartItem, ClearCart, OpenCart, RemoveCartItem, SetCartItemQuantity
from commerce.cart.merging import MergeCart
from commerce.shared.locking import cart_locks
from commerce.utils.settings import cart_merge_mode


def _dispatch(account_id, command):
    with cart_locks.hold(account_id):
        cart_id = current_domain.process(command, asynchronous=False)
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def get(account_id):
    """The account's cart, created empty on first access."""
    return _dispatch(account_id, OpenCart(account_id=account_id))


def add_item(account_id, product_id, quantity=1):
    require_quantity(quantity, 1)
    return _dispatch(account_id, AddCartItem(account_id=account_id, product_id=product_id, quantity=quantity))


def set_item_quantity(account_id, product_id, quantity):
    require_quantity(quantity, 0)
    return _dispatch(
        account_id,
        SetCartItemQuantity(account_id=account_id, product_id=product_id, quantity=quantity),
    )


def remove_item(account_id, product_id):
    return _dispatch(account_id, RemoveCartItem(account_id=account_id, product_id=product_id))


def clear(account_id):
    return _dispatch(account_id, ClearCart(account_id=account_id))


def merge(account_id, items, mode=None):
    """Fold client lines ``[{"product_id", "quantity"}, ...]`` into the cart.

    ``mode`` defaults to the ``COMMERCE_CART_MERGE_MODE`` setting.
    """
    if not isinstance(items, (list, tuple)):
        raise ValidationError({"items": ["Cart items must be a list"]})
    mode = coerce_merge_mode(mode if mode is not None else cart_merge_mode())
    lines = [{"product_id": str(line.get("product_id") or ""), "quantity": line.get("quantity")} for line in items]
    return _dispatch(
        account_id,
        MergeCart(account_id=account_id, items=json.dumps(lines), mode=mode.value),
    )


__all__ = ["MergeMode", "add_item", "clear", "get", "merge", "remove_item", "set_item_quantity"]
