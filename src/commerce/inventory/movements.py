"""Ledger primitive shared by every handler that moves stock.

Must run inside a unit of work while the caller holds the product's lock;
the product and its new log entry are persisted together.
"""

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from commerce.inventory.product import Product, StockChangeReason, coerce_reason
from commerce.inventory.stock_log import StockLogEntry

logger = structlog.get_logger(__name__)


def apply_adjustment(product, change, reason, actor_id, detail=None, order_id=None):
    """Apply ``change`` to ``product``, append its log entry, and stage both for commit."""
    reason = coerce_reason(reason)
    if reason == StockChangeReason.ORDER and not order_id:
        raise ValidationError({"order_id": ["Order reference is required for order stock changes"]})

    previous = product.stock
    product.adjust_stock(change, reason, actor_id, order_id=order_id)
    entry = StockLogEntry.record(
        product,
        change=change,
        reason=reason,
        actor_id=actor_id,
        detail=detail,
        order_id=order_id,
    )

    current_domain.repository_for(Product).add(product)
    current_domain.repository_for(StockLogEntry).add(entry)

    logger.info(
        "Stock adjusted",
        product_id=str(product.id),
        change=change,
        previous_stock=previous,
        new_stock=product.stock,
        reason=reason.value,
        order_id=str(order_id) if order_id else None,
        actor_id=str(actor_id),
    )
    return entry
