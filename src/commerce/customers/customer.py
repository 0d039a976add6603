"""Customer aggregate and the account → customer lookup index."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, ValueObject

from commerce.customers.email import normalize_email
from commerce.customers.events import CustomerDetailsUpdated, CustomerRegistered
from commerce.domain import commerce
from commerce.shared.address import Address


def _as_address(address):
    if address is None or isinstance(address, Address):
        return address
    return Address.from_dict(address)


@commerce.aggregate
class Customer:
    """The canonical identity behind orders, keyed naturally by email.

    Several accounts may resolve to the same customer when they share an
    email; the newest resolution's name, phone and address win.
    """

    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=20)
    address = ValueObject(Address)
    account_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, email, name, address, phone=None, account_id=None):
        if not name:
            raise ValidationError({"name": ["Name is required"]})
        if address is None:
            raise ValidationError({"address": ["Address is required"]})

        email = normalize_email(email)
        now = datetime.now(UTC)
        customer = cls(
            name=name,
            email=email,
            phone=phone,
            address=_as_address(address),
            account_id=account_id,
            created_at=now,
            updated_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer.id),
                account_id=str(account_id) if account_id else None,
                email=email,
                name=name,
                registered_at=now,
            )
        )
        return customer

    def update_details(self, name=None, phone=None, address=None, email=None):
        """Overwrite whichever fields are provided (last write wins)."""
        if email:
            self.email = normalize_email(email)
        if name:
            self.name = name
        if phone:
            self.phone = phone
        if address:
            self.address = _as_address(address)

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CustomerDetailsUpdated(
                customer_id=str(self.id),
                email=self.email,
                name=self.name,
                phone=self.phone,
                updated_at=self.updated_at,
            )
        )


@commerce.aggregate
class CustomerAccount:
    """Lookup index: which customer an account currently resolves to."""

    account_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    linked_at = DateTime()
