"""Cart line management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart
from commerce.domain import commerce
from commerce.inventory.product import Product

logger = structlog.get_logger(__name__)


@commerce.command(part_of="ShoppingCart")
class OpenCart:
    account_id = Identifier(required=True)


@commerce.command(part_of="ShoppingCart")
class AddCartItem:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)


@commerce.command(part_of="ShoppingCart")
class SetCartItemQuantity:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@commerce.command(part_of="ShoppingCart")
class RemoveCartItem:
    account_id = Identifier(required=True)
    product_id = Identifier(required=True)


@commerce.command(part_of="ShoppingCart")
class ClearCart:
    account_id = Identifier(required=True)


def cart_for(account_id):
    """The account's cart, or None if it has never been opened."""
    carts = current_domain.repository_for(ShoppingCart)._dao.query.filter(account_id=str(account_id)).all().items
    return carts[0] if carts else None


def open_cart(account_id):
    return cart_for(account_id) or ShoppingCart.open(account_id)


@commerce.command_handler(part_of=ShoppingCart)
class CartItemsHandler:
    @handle(OpenCart)
    def open_account_cart(self, command):
        cart = cart_for(command.account_id)
        if cart is None:
            cart = ShoppingCart.open(command.account_id)
            current_domain.repository_for(ShoppingCart).add(cart)
            logger.info("Cart opened", account_id=str(command.account_id), cart_id=str(cart.id))
        return str(cart.id)

    @handle(AddCartItem)
    def add_cart_item(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        cart = open_cart(command.account_id)
        cart.add_item(product, command.quantity if command.quantity is not None else 1)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(SetCartItemQuantity)
    def set_cart_item_quantity(self, command):
        cart = open_cart(command.account_id)
        product = None
        if command.quantity and command.quantity > 0 and cart.line_for(command.product_id) is not None:
            product = current_domain.repository_for(Product).get(command.product_id)
        cart.set_item_quantity(command.product_id, command.quantity, product=product)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = open_cart(command.account_id)
        cart.remove_item(command.product_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = open_cart(command.account_id)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)
