"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Identifier, String

from commerce.domain import commerce


@commerce.event(part_of="Customer")
class CustomerRegistered:
    """A customer record was created during resolution."""

    __version__ = 1

    customer_id = Identifier(required=True)
    account_id = Identifier()
    email = String(required=True)
    name = String(required=True)
    registered_at = DateTime(required=True)


@commerce.event(part_of="Customer")
class CustomerDetailsUpdated:
    """Name, phone, address or email of an existing customer were overwritten."""

    __version__ = 1

    customer_id = Identifier(required=True)
    email = String(required=True)
    name = String(required=True)
    phone = String()
    updated_at = DateTime(required=True)
