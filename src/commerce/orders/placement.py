"""Order placement — command and handler.

Every product in the order is loaded and checked before anything is written,
so a missing product or a short line rejects the whole order with no stock
deducted. The deductions and the order insert share one unit of work. The
caller must hold the locks of every product in the order.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.inventory.movements import apply_adjustment
from commerce.inventory.product import Product, StockChangeReason
from commerce.orders.order import Order, requested_quantities, validate_order_lines
from commerce.shared.errors import InsufficientStock

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Order")
class PlaceOrder:
    account_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"product_id", "quantity", "name"?, "price"?}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(max_length=50)


def _snapshot(line, product):
    """Submitted name and price win; the product's current values fill gaps."""
    return {
        "product_id": str(product.id),
        "name": line.get("name") or product.name,
        "price": line["price"] if line.get("price") is not None else product.price,
        "quantity": line["quantity"],
    }


@commerce.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        validate_order_lines(items)

        product_repo = current_domain.repository_for(Product)
        totals = requested_quantities(items)
        products = {product_id: product_repo.get(product_id) for product_id in totals}

        for product_id, quantity in totals.items():
            product = products[product_id]
            if product.stock < quantity:
                logger.warning(
                    "Order rejected",
                    account_id=str(command.account_id),
                    product_id=product_id,
                    available=product.stock,
                    requested=quantity,
                )
                raise InsufficientStock(product_id, product.stock, quantity, product_name=product.name)

        order = Order.place(
            customer_id=command.customer_id,
            account_id=command.account_id,
            lines=[_snapshot(line, products[str(line["product_id"])]) for line in items],
            shipping_address=shipping_address,
            payment_method=command.payment_method,
        )

        for product_id, quantity in totals.items():
            apply_adjustment(
                products[product_id],
                change=-quantity,
                reason=StockChangeReason.ORDER,
                actor_id=command.account_id,
                detail=f"Order {order.id}",
                order_id=order.id,
            )

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            account_id=str(order.account_id),
            total_price=order.total_price,
            line_count=len(order.items),
        )
        return str(order.id)
