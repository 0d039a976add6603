"""Shopping Cart aggregate — one durable cart per account.

Lines snapshot the product's name and price at the time they are written.
``total_items`` and ``total_price`` are recomputed from the lines after every
mutation, so they never drift from the items they summarise.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from commerce.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartMerged,
)
from commerce.domain import commerce
from commerce.shared.errors import InsufficientStock


class MergeMode(Enum):
    REPLACE = "replace"  # incoming quantity overwrites a matching line
    ADD = "add"  # incoming quantity is added to a matching line


def coerce_merge_mode(value):
    if isinstance(value, MergeMode):
        return value
    try:
        return MergeMode(str(value).lower())
    except ValueError:
        raise ValidationError({"mode": [f"Unknown merge mode: {value}"]}) from None


def require_quantity(quantity, minimum):
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError({"quantity": ["Quantity must be a whole number"]})
    if quantity < minimum:
        raise ValidationError({"quantity": [f"Quantity must be at least {minimum}"]})


@commerce.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@commerce.aggregate
class ShoppingCart:
    account_id = Identifier(required=True)
    items = HasMany(CartItem)
    total_items = Integer(default=0)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, account_id):
        now = datetime.now(UTC)
        return cls(account_id=account_id, total_items=0, total_price=0.0, created_at=now, updated_at=now)

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def _recalculate_totals(self):
        self.total_items = sum(item.quantity for item in self.items)
        self.total_price = round(sum(item.price * item.quantity for item in self.items), 2)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity=1):
        """Add ``quantity`` of ``product``, summing with an existing line.

        The combined line quantity may not exceed the product's current stock.
        The line's name and price are refreshed from the product.
        """
        require_quantity(quantity, 1)

        existing = self.line_for(product.id)
        combined = quantity + (existing.quantity if existing else 0)
        if combined > product.stock:
            raise InsufficientStock(product.id, product.stock, combined, product_name=product.name)

        if existing:
            existing.quantity = combined
            existing.name = product.name
            existing.price = product.price
        else:
            self.add_items(CartItem(product_id=product.id, name=product.name, price=product.price, quantity=quantity))

        self._recalculate_totals()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                account_id=str(self.account_id),
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=combined,
            )
        )

    def set_item_quantity(self, product_id, quantity, product=None):
        """Set a line's quantity; zero removes it.

        ``product`` is required for a positive quantity, to check current stock.
        """
        require_quantity(quantity, 0)

        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError(f"Product `{product_id}` is not in the cart")

        if quantity == 0:
            self.remove_item(product_id)
            return

        if quantity > product.stock:
            raise InsufficientStock(product.id, product.stock, quantity, product_name=product.name)

        previous_quantity = item.quantity
        item.quantity = quantity
        self._recalculate_totals()
        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                account_id=str(self.account_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Drop the product's line. Absent lines are ignored."""
        item = self.line_for(product_id)
        if item is None:
            return

        self.remove_items(item)
        self._recalculate_totals()
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                account_id=str(self.account_id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self._recalculate_totals()
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                account_id=str(self.account_id),
                items_removed=removed,
            )
        )

    # -------------------------------------------------------------------
    # Merging a client-held cart
    # -------------------------------------------------------------------
    def merge(self, incoming, mode=MergeMode.REPLACE):
        """Fold ``(product, quantity)`` pairs into this cart.

        Each quantity is clamped to the product's stock; pairs clamped to zero
        are skipped. Matching lines take the product's current price. Missing
        products must be filtered out by the caller and count as skipped.
        """
        mode = coerce_merge_mode(mode)
        merged = skipped = 0

        for product, quantity in incoming:
            if product is None:
                skipped += 1
                continue

            existing = self.line_for(product.id)
            if mode == MergeMode.ADD and existing:
                requested = existing.quantity + quantity
            else:
                requested = quantity
            safe_quantity = min(requested, product.stock)
            if safe_quantity <= 0:
                skipped += 1
                continue

            if existing:
                existing.quantity = safe_quantity
                existing.price = product.price
            else:
                self.add_items(
                    CartItem(product_id=product.id, name=product.name, price=product.price, quantity=safe_quantity)
                )
            merged += 1

        self._recalculate_totals()
        self.raise_(
            CartMerged(
                cart_id=str(self.id),
                account_id=str(self.account_id),
                mode=mode.value,
                items_merged_count=merged,
                items_skipped_count=skipped,
            )
        )
