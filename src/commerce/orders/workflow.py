"""Order Workflow — placing orders and moving them through fulfilment."""

import json

from protean.utils.globals import current_domain

from commerce.customers import directory
from commerce.orders.order import Order, coerce_status, requested_quantities, validate_order_lines
from commerce.orders.placement import PlaceOrder
from commerce.orders.status import UpdateOrderStatus
from commerce.shared.address import Address
from commerce.shared.errors import Forbidden
from commerce.shared.locking import order_locks, product_locks


def _address_dict(address):
    if address is None:
        return None
    if isinstance(address, Address):
        return address.to_dict()
    return dict(address)


def create_order(
    account_id,
    items,
    shipping_address,
    payment_method=None,
    customer_id=None,
    customer_name=None,
    customer_email=None,
    customer_phone=None,
):
    """Place an order for ``account_id`` and deduct its stock, all or nothing.

    ``items`` is a list of ``{"product_id", "quantity", "name"?, "price"?}``.
    The customer is ``customer_id`` when given, otherwise it is resolved from
    the inline customer fields and the shipping address.
    """
    items = [dict(line) for line in items or []]
    validate_order_lines(items)
    address = _address_dict(shipping_address)

    if customer_id:
        customer = directory.get_customer(customer_id)
    else:
        customer = directory.resolve(
            account_id,
            email=customer_email,
            name=customer_name,
            phone=customer_phone,
            address=address,
        )

    for line in items:
        line["product_id"] = str(line["product_id"])

    with product_locks.hold(*requested_quantities(items)):
        order_id = current_domain.process(
            PlaceOrder(
                account_id=account_id,
                customer_id=customer.id,
                items=json.dumps(items),
                shipping_address=json.dumps(address) if address is not None else None,
                payment_method=payment_method,
            ),
            asynchronous=False,
        )
    return get_order(order_id, account_id, privileged=True)


def update_status(order_id, new_status):
    status = coerce_status(new_status)
    with order_locks.hold(order_id):
        current_domain.process(UpdateOrderStatus(order_id=order_id, status=status.value), asynchronous=False)
    return current_domain.repository_for(Order).get(order_id)


def _newest_first(query):
    return query.order_by("-created_at").limit(None).all().items


def list_orders(status=None):
    query = current_domain.repository_for(Order)._dao.query
    if status is not None:
        query = query.filter(status=coerce_status(status).value)
    return _newest_first(query)


def get_order(order_id, account_id, privileged=False):
    """Fetch an order; non-privileged callers may only see their own customer's orders."""
    order = current_domain.repository_for(Order).get(order_id)
    if privileged:
        return order

    customer = directory.customer_for_account(account_id)
    if customer is None or str(customer.id) != str(order.customer_id):
        raise Forbidden(f"Order `{order_id}` does not belong to this account")
    return order


def orders_for_account(account_id):
    customer = directory.customer_for_account(account_id)
    if customer is None:
        return []
    return _newest_first(current_domain.repository_for(Order)._dao.query.filter(customer_id=str(customer.id)))
