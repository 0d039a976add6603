"""StockLogEntry aggregate — one immutable row per stock change."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from commerce.domain import commerce
from commerce.inventory.product import StockChangeReason, coerce_reason


@commerce.aggregate
class StockLogEntry:
    """An append-only record explaining one movement of a product's stock counter.

    ``sequence`` is the product's ``stock_version`` after the change, so
    entries of one product are totally ordered even when timestamps collide.
    """

    product_id = Identifier(required=True)
    sequence = Integer(required=True, min_value=1)
    change = Integer(required=True)
    stock_after = Integer(required=True, min_value=0)
    reason = String(
        choices=StockChangeReason,
        default=StockChangeReason.MANUAL_ADJUSTMENT.value,
    )
    detail = String(max_length=500)
    order_id = Identifier()
    actor_id = Identifier(required=True)
    created_at = DateTime()

    @classmethod
    def record(cls, product, change, reason, actor_id, detail=None, order_id=None):
        """Capture the change just applied to ``product``."""
        reason = coerce_reason(reason)
        if reason == StockChangeReason.ORDER and not order_id:
            raise ValidationError({"order_id": ["Order reference is required for order stock changes"]})

        return cls(
            product_id=str(product.id),
            sequence=product.stock_version,
            change=change,
            stock_after=product.stock,
            reason=reason.value,
            detail=detail,
            order_id=str(order_id) if order_id else None,
            actor_id=str(actor_id),
            created_at=datetime.now(UTC),
        )
