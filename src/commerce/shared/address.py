"""Postal address value object, shared by customers and order snapshots."""

from protean.fields import String

from commerce.domain import commerce

_ADDRESS_FIELDS = ("street", "city", "state", "postal_code", "country")


@commerce.value_object
class Address:
    """A postal address.

    Recorded on an Order it is a snapshot: later edits to the Customer's
    address never reach orders already placed.
    """

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="United States")

    @classmethod
    def from_dict(cls, data):
        """Build from a mapping, ignoring unknown keys and empty values."""
        values = {key: data[key] for key in _ADDRESS_FIELDS if data.get(key) not in (None, "")}
        return cls(**values)
