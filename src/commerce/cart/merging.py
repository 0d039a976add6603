"""Cart sync — fold a client-held cart into the account's durable cart."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from commerce.cart.cart import ShoppingCart, coerce_merge_mode
from commerce.cart.items import open_cart
from commerce.domain import commerce
from commerce.inventory.product import Product

logger = structlog.get_logger(__name__)


@commerce.command(part_of="ShoppingCart")
class MergeCart:
    account_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"product_id", "quantity"}
    mode = String(required=True, max_length=20)


def _incoming_pairs(items):
    """Resolve raw client lines into ``(product or None, quantity)`` pairs."""
    repo = current_domain.repository_for(Product)
    pairs = []
    for line in items:
        product_id = line.get("product_id")
        quantity = line.get("quantity")
        if not product_id or isinstance(quantity, bool) or not isinstance(quantity, int):
            pairs.append((None, 0))
            continue
        try:
            pairs.append((repo.get(product_id), quantity))
        except ObjectNotFoundError:
            pairs.append((None, 0))
    return pairs


@commerce.command_handler(part_of=ShoppingCart)
class MergeCartHandler:
    @handle(MergeCart)
    def merge_cart(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        if not isinstance(items, list):
            raise ValidationError({"items": ["Cart items must be a list"]})

        mode = coerce_merge_mode(command.mode)
        cart = open_cart(command.account_id)
        cart.merge(_incoming_pairs(items), mode=mode)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Cart merged",
            account_id=str(command.account_id),
            cart_id=str(cart.id),
            mode=mode.value,
            lines=len(items),
        )
        return str(cart.id)
