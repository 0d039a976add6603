"""Stock Ledger — the only entry point for reading and moving product stock.

Every write holds the product's lock for the duration of its command, which
includes the unit-of-work commit, so two adjustments of one product never
interleave between the stock check and the write.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from commerce.inventory.adjustment import AdjustStock
from commerce.inventory.catalogue import RegisterProduct, RemoveProduct, UpdateProductDetails
from commerce.inventory.product import Product, StockChangeReason
from commerce.inventory.stock_log import StockLogEntry
from commerce.shared.locking import product_locks


def register_product(name, price, actor_id, stock=0, category=None, description=None):
    product_id = current_domain.process(
        RegisterProduct(
            name=name,
            price=price,
            initial_stock=stock,
            category=category,
            description=description,
            actor_id=actor_id,
        ),
        asynchronous=False,
    )
    return get_product(product_id)


def update_product(product_id, name=None, price=None, category=None, description=None):
    current_domain.process(
        UpdateProductDetails(
            product_id=product_id,
            name=name,
            price=price,
            category=category,
            description=description,
        ),
        asynchronous=False,
    )
    return get_product(product_id)


def get_product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def list_products(category=None):
    query = current_domain.repository_for(Product)._dao.query
    if category:
        query = query.filter(category=category)
    return sorted(query.limit(None).all().items, key=lambda p: p.name.lower())


def adjust_stock(
    product_id,
    delta,
    actor_id,
    reason=StockChangeReason.MANUAL_ADJUSTMENT.value,
    detail=None,
    order_id=None,
):
    """Apply a signed stock change and return the new stock level.

    Raises ObjectNotFoundError for an unknown product and InsufficientStock
    when the change would take stock below zero; stock is untouched then.
    """
    stock, _ = record_adjustment(product_id, delta, actor_id, reason=reason, detail=detail, order_id=order_id)
    return stock


def record_adjustment(
    product_id,
    delta,
    actor_id,
    reason=StockChangeReason.MANUAL_ADJUSTMENT.value,
    detail=None,
    order_id=None,
):
    """Same as ``adjust_stock`` but returns ``(stock, entry)``.

    Both are read back before the product lock is released, so ``entry`` is
    the log entry this call appended even when other writers are queued.
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError({"adjustment": ["Adjustment must be an integer"]})
    with product_locks.hold(product_id):
        entry_id = current_domain.process(
            AdjustStock(
                product_id=product_id,
                change=delta,
                reason=reason.value if isinstance(reason, StockChangeReason) else reason,
                detail=detail,
                order_id=order_id,
                actor_id=actor_id,
            ),
            asynchronous=False,
        )
        entry = current_domain.repository_for(StockLogEntry).get(entry_id)
        return get_product(product_id).stock, entry


def remove_product(product_id):
    """Delete a product from the catalogue. Its stock log stays as an audit trail."""
    with product_locks.hold(product_id):
        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)


def list_logs(product_id):
    """All log entries of a product, newest first."""
    get_product(product_id)
    query = current_domain.repository_for(StockLogEntry)._dao.query.filter(product_id=str(product_id))
    return query.order_by("-sequence").limit(None).all().items


def latest_log(product_id):
    entries = list_logs(product_id)
    return entries[0] if entries else None


def check_availability(product_id, quantity):
    """Whether ``quantity`` units are on hand right now. Not a reservation."""
    try:
        product = get_product(product_id)
    except ObjectNotFoundError:
        return False
    return product.is_available(quantity)
