"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from commerce.domain import commerce


@commerce.event(part_of="ShoppingCart")
class CartItemAdded:
    __version__ = 1

    cart_id = Identifier(required=True)
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@commerce.event(part_of="ShoppingCart")
class CartItemQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@commerce.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)


@commerce.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    account_id = Identifier(required=True)
    items_removed = Integer(required=True)


@commerce.event(part_of="ShoppingCart")
class CartMerged:
    """A client-held cart was folded into the account's durable cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    account_id = Identifier(required=True)
    mode = String(required=True)
    items_merged_count = Integer(required=True)
    items_skipped_count = Integer(required=True)
