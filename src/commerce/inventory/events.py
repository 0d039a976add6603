"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from commerce.domain import commerce


@commerce.event(part_of="Product")
class ProductRegistered:
    """A new product entered the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    category = String()
    registered_at = DateTime(required=True)


@commerce.event(part_of="Product")
class ProductDetailsUpdated:
    """Catalogue fields (name, price, category, description) of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    category = String()
    updated_at = DateTime(required=True)


@commerce.event(part_of="Product")
class StockAdjusted:
    """The stock counter of a product moved by a signed amount."""

    __version__ = 1

    product_id = Identifier(required=True)
    change = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reason = String(required=True)
    order_id = Identifier()
    actor_id = Identifier(required=True)
    adjusted_at = DateTime(required=True)
