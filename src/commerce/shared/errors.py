"""Failure kinds raised by the commerce core.

Missing records surface as Protean's ``ObjectNotFoundError`` and malformed
input or illegal transitions as Protean's ``ValidationError``; the two kinds
below have no framework counterpart.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

__all__ = [
    "Forbidden",
    "InsufficientStock",
    "ObjectNotFoundError",
    "ValidationError",
]


class InsufficientStock(Exception):
    """A requested decrement would take a product's stock below zero."""

    def __init__(self, product_id, available, requested, product_name=None):
        self.product_id = str(product_id)
        self.available = available
        self.requested = requested
        self.product_name = product_name
        label = product_name or self.product_id
        super().__init__(f"Not enough stock for {label}. Available: {available}, requested: {requested}")


class Forbidden(Exception):
    """The caller does not own the record it asked for."""
