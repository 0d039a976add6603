"""Stock adjustment — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.inventory.movements import apply_adjustment
from commerce.inventory.product import Product, StockChangeReason


@commerce.command(part_of="Product")
class AdjustStock:
    """Move a product's stock by a signed amount and log why."""

    product_id = Identifier(required=True)
    change = Integer(required=True)
    reason = String(default=StockChangeReason.MANUAL_ADJUSTMENT.value)
    detail = String(max_length=500)
    order_id = Identifier()
    actor_id = Identifier(required=True)


@commerce.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        entry = apply_adjustment(
            product,
            change=command.change,
            reason=command.reason,
            actor_id=command.actor_id,
            detail=command.detail,
            order_id=command.order_id,
        )
        return str(entry.id)
