"""Product aggregate — catalogue entry plus the stock counter the ledger explains.

Stock Model:
    stock:          units on hand, never below zero
    stock_version:  bumped on every stock change; doubles as the sequence
                    number of the matching StockLogEntry

``stock`` is only ever changed by ``adjust_stock``, and ``adjust_stock`` is
only called from the ledger primitive in ``commerce.inventory.movements``,
so every change has exactly one log entry.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from commerce.domain import commerce
from commerce.inventory.events import ProductDetailsUpdated, ProductRegistered, StockAdjusted
from commerce.shared.errors import InsufficientStock


class StockChangeReason(Enum):
    ORDER = "order"
    MANUAL_ADJUSTMENT = "manual-adjustment"
    RETURN = "return"
    OTHER = "other"


def coerce_reason(value):
    """Map a reason string (or member) to StockChangeReason, rejecting unknown values."""
    try:
        return StockChangeReason(value)
    except ValueError:
        allowed = ", ".join(r.value for r in StockChangeReason)
        raise ValidationError({"reason": [f"Unknown reason {value!r}; expected one of: {allowed}"]}) from None


@commerce.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    category = String(max_length=100)
    stock_version = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, name, price, category=None, description=None):
        """Create a product with no stock. Initial stock is booked through the ledger."""
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=round(float(price), 2),
            category=category,
            description=description,
            stock=0,
            stock_version=0,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                category=category,
                registered_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Catalogue fields
    # -------------------------------------------------------------------
    def update_details(self, name=None, price=None, category=None, description=None):
        """Partially update catalogue fields. Stock is not touched here."""
        if name is not None:
            self.name = name
        if price is not None:
            if price < 0:
                raise ValidationError({"price": ["Price must be positive"]})
            self.price = round(float(price), 2)
        if category is not None:
            self.category = category
        if description is not None:
            self.description = description

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                category=self.category,
                updated_at=self.updated_at,
            )
        )

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def is_available(self, quantity):
        return quantity > 0 and self.stock >= quantity

    def adjust_stock(self, change, reason, actor_id, order_id=None):
        """Move stock by ``change`` and return the new stock level."""
        if isinstance(change, bool) or not isinstance(change, int):
            raise ValidationError({"adjustment": ["Adjustment must be an integer"]})
        if change == 0:
            raise ValidationError({"adjustment": ["Adjustment must be non-zero"]})
        reason = coerce_reason(reason)

        previous = self.stock
        if previous + change < 0:
            raise InsufficientStock(self.id, available=previous, requested=-change, product_name=self.name)

        now = datetime.now(UTC)
        self.stock = previous + change
        self.stock_version = (self.stock_version or 0) + 1
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                change=change,
                previous_stock=previous,
                new_stock=self.stock,
                reason=reason.value,
                order_id=str(order_id) if order_id else None,
                actor_id=str(actor_id),
                adjusted_at=now,
            )
        )
        return self.stock
