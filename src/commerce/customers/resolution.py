"""Resolve the customer behind an account: email first, then the account index."""

import json
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from commerce.customers.customer import Customer, CustomerAccount
from commerce.customers.email import normalize_email
from commerce.domain import commerce

logger = structlog.get_logger(__name__)


@commerce.command(part_of="Customer")
class ResolveCustomer:
    account_id = Identifier(required=True)
    email = String(max_length=254)
    name = String(max_length=100)
    phone = String(max_length=20)
    address = Text()  # JSON: address dict


def find_by_email(email):
    # Oldest record is canonical if duplicates ever slipped in
    matches = current_domain.repository_for(Customer)._dao.query.filter(email=email).order_by("created_at").all().items
    return matches[0] if matches else None


def linked_customer(account_id):
    try:
        link = current_domain.repository_for(CustomerAccount).get(str(account_id))
    except ObjectNotFoundError:
        return None
    try:
        return current_domain.repository_for(Customer).get(link.customer_id)
    except ObjectNotFoundError:
        return None


def _link_account(account_id, customer_id):
    """Point the account at the customer, reusing the existing index row."""
    links = current_domain.repository_for(CustomerAccount)
    try:
        link = links.get(str(account_id))
    except ObjectNotFoundError:
        link = CustomerAccount(account_id=str(account_id), customer_id=str(customer_id))
    link.customer_id = str(customer_id)
    link.linked_at = datetime.now(UTC)
    links.add(link)


@commerce.command_handler(part_of=Customer)
class CustomerResolutionHandler:
    @handle(ResolveCustomer)
    def resolve_customer(self, command):
        repo = current_domain.repository_for(Customer)
        email = normalize_email(command.email) if command.email else None
        address = json.loads(command.address) if command.address else None

        customer = find_by_email(email) if email else None
        if customer is not None:
            customer.update_details(name=command.name, phone=command.phone, address=address)
            logger.info("Customer matched by email", customer_id=str(customer.id), account_id=str(command.account_id))
        else:
            customer = linked_customer(command.account_id)
            if customer is not None:
                customer.update_details(
                    name=command.name,
                    phone=command.phone,
                    address=address,
                    email=email,
                )
                logger.info(
                    "Customer matched by account", customer_id=str(customer.id), account_id=str(command.account_id)
                )
            elif email is None:
                raise ValidationError({"email": ["Email is required to register a customer"]})
            else:
                customer = Customer.register(
                    email=email,
                    name=command.name,
                    address=address,
                    phone=command.phone,
                    account_id=command.account_id,
                )
                logger.info("Customer registered", customer_id=str(customer.id), account_id=str(command.account_id))

        repo.add(customer)
        _link_account(command.account_id, customer.id)
        return str(customer.id)
