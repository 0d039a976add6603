"""Order aggregate — an immutable record of what was bought, and where it is.

State Machine:
    PENDING → PACKING → PACKED → SHIPPED → COMPLETED

An order may skip ahead but never move back. Fields that must change
alongside a transition are declared in ``_TRANSITION_EFFECTS``, keyed by
(from, to).
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from commerce.domain import commerce
from commerce.orders.events import OrderPlaced, OrderStatusChanged
from commerce.shared.address import Address

DEFAULT_PAYMENT_METHOD = "PayPal"


class OrderStatus(Enum):
    PENDING = "pending"
    PACKING = "packing"
    PACKED = "packed"
    SHIPPED = "shipped"
    COMPLETED = "completed"


_RANK = {status: rank for rank, status in enumerate(OrderStatus)}


def _mark_delivered(order, now):
    order.is_delivered = True
    order.delivered_at = now


_TRANSITION_EFFECTS = {
    (OrderStatus.PENDING, OrderStatus.SHIPPED): (_mark_delivered,),
    (OrderStatus.PACKING, OrderStatus.SHIPPED): (_mark_delivered,),
    (OrderStatus.PACKED, OrderStatus.SHIPPED): (_mark_delivered,),
    (OrderStatus.PENDING, OrderStatus.COMPLETED): (_mark_delivered,),
    (OrderStatus.PACKING, OrderStatus.COMPLETED): (_mark_delivered,),
    (OrderStatus.PACKED, OrderStatus.COMPLETED): (_mark_delivered,),
}


def coerce_status(value):
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError({"status": [f"Unknown status {value!r}; expected one of: {allowed}"]}) from None


def validate_order_lines(items):
    """Check the shape of submitted order lines before anything is looked up."""
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    for index, line in enumerate(items):
        if not isinstance(line, dict) or not line.get("product_id"):
            raise ValidationError({"items": [f"Item {index} is missing a product"]})
        quantity = line.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"items": [f"Item {index} must have a whole-number quantity of at least 1"]})
        price = line.get("price")
        if price is not None and (isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0):
            raise ValidationError({"items": [f"Item {index} has an invalid price"]})


def requested_quantities(items):
    """Total quantity per product across all lines, in first-seen order."""
    totals = {}
    for line in items:
        product_id = str(line["product_id"])
        totals[product_id] = totals.get(product_id, 0) + line["quantity"]
    return totals


@commerce.entity(part_of="Order")
class OrderItem:
    """A line as submitted at checkout; name and price are snapshots."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@commerce.aggregate
class Order:
    customer_id = Identifier(required=True)
    account_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_price = Float(default=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_address = ValueObject(Address)
    payment_method = String(max_length=50, default=DEFAULT_PAYMENT_METHOD)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, account_id, lines, shipping_address, payment_method=None):
        """Create a pending order.

        Args:
            lines: Dicts with product_id, name, price and quantity; name and
                   price are already resolved to their snapshot values.
            shipping_address: Address or a dict of its fields.
        """
        validate_order_lines(lines)
        if shipping_address is None:
            raise ValidationError({"shipping_address": ["Shipping address is required"]})
        if not isinstance(shipping_address, Address):
            shipping_address = Address.from_dict(shipping_address)

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id,
            account_id=account_id,
            shipping_address=shipping_address,
            payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(
                OrderItem(
                    product_id=line["product_id"],
                    name=line["name"],
                    price=line["price"],
                    quantity=line["quantity"],
                )
            )
        order.total_price = round(sum(item.price * item.quantity for item in order.items), 2)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                account_id=str(account_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "name": item.name,
                            "price": item.price,
                            "quantity": item.quantity,
                        }
                        for item in order.items
                    ]
                ),
                total_price=order.total_price,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def update_status(self, new_status):
        target = coerce_status(new_status)
        current = OrderStatus(self.status)

        if target == current:
            raise ValidationError({"status": [f"Order is already {current.value}"]})
        if _RANK[target] < _RANK[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        for effect in _TRANSITION_EFFECTS.get((current, target), ()):
            effect(self, now)

        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                is_delivered=bool(self.is_delivered),
                changed_at=now,
            )
        )
