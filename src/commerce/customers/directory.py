"""Customer Directory — maps accounts and emails onto Customer records."""

import json

from protean.utils.globals import current_domain

from commerce.customers.customer import Customer
from commerce.customers.email import normalize_email
from commerce.customers.resolution import ResolveCustomer, linked_customer
from commerce.shared.address import Address
from commerce.shared.locking import customer_locks


def _address_payload(address):
    if address is None:
        return None
    if isinstance(address, Address):
        return json.dumps(address.to_dict())
    return json.dumps(dict(address))


def resolve(account_id, email=None, name=None, phone=None, address=None):
    """Return the Customer for this account, creating or refreshing it.

    Lookup is by email first, then by the account's last resolution. Non-empty
    incoming details overwrite the stored ones.
    """
    keys = [f"account:{account_id}"]
    if email:
        keys.append(f"email:{normalize_email(email)}")

    with customer_locks.hold(*keys):
        customer_id = current_domain.process(
            ResolveCustomer(
                account_id=account_id,
                email=email,
                name=name,
                phone=phone,
                address=_address_payload(address),
            ),
            asynchronous=False,
        )
    return get_customer(customer_id)


def get_customer(customer_id):
    return current_domain.repository_for(Customer).get(customer_id)


def customer_for_account(account_id):
    """The customer this account last resolved to, or None."""
    return linked_customer(account_id)
