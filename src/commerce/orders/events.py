"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from commerce.domain import commerce


@commerce.event(part_of="Order")
class OrderPlaced:
    """An order was accepted and its stock deducted."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    account_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    total_price = Float(required=True)
    payment_method = String()
    placed_at = DateTime(required=True)


@commerce.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    is_delivered = Boolean(default=False)
    changed_at = DateTime(required=True)
