"""BDD tests for the checkout flow."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

from commerce.cart import store
from commerce.inventory import ledger
from commerce.orders import workflow
from commerce.shared.errors import InsufficientStock

scenarios("features/checkout.feature")

BUYER = "acct-buyer"
SHIPPING = {
    "street": "12 Dock Road",
    "city": "Tilbury",
    "state": "Essex",
    "postal_code": "RM18 7EH",
}


def _order(items, error, placed):
    error["exc"] = None
    try:
        placed["order"] = workflow.create_order(
            BUYER,
            items,
            SHIPPING,
            customer_name="Dana Reyes",
            customer_email="dispatch@harbour.example",
        )
    except InsufficientStock as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the buyer adds {qty:d} to the cart"))
def add_to_cart(product, qty, error):
    error["exc"] = None
    try:
        store.add_item(BUYER, product.id, qty)
    except InsufficientStock as exc:
        error["exc"] = exc


@when(parsers.cfparse("the buyer sets the cart quantity to {qty:d}"))
def set_cart_quantity(product, qty):
    store.set_item_quantity(BUYER, product.id, qty)


@when("the buyer orders the cart contents")
def order_cart(error, placed):
    cart = store.get(BUYER)
    items = [{"product_id": item.product_id, "quantity": item.quantity} for item in cart.items]
    _order(items, error, placed)
    store.clear(BUYER)


@when(parsers.cfparse("the buyer orders {qty:d} more"))
def order_more(product, qty, error, placed):
    _order([{"product_id": product.id, "quantity": qty}], error, placed)


@when(parsers.cfparse("the buyer orders {qty:d} directly"))
def order_directly(product, qty, error, placed):
    _order([{"product_id": product.id, "quantity": qty}], error, placed)


@when(parsers.cfparse('staff moves the order to "{status}"'))
def move_order(status, placed, error):
    error["exc"] = None
    try:
        placed["order"] = workflow.update_status(placed["order"].id, status)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart holds {count:d} items"))
def cart_holds(count):
    assert store.get(BUYER).total_items == count


@then(parsers.cfparse('the latest stock log shows a change of {change:d} for reason "{reason}"'))
def latest_log(product, change, reason, placed):
    entry = ledger.latest_log(product.id)
    assert entry.change == change
    assert entry.reason == reason
    assert entry.order_id == str(placed["order"].id)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(placed, status):
    assert workflow.get_order(placed["order"].id, BUYER).status == status


@then("the order is marked delivered")
def order_delivered(placed):
    order = workflow.get_order(placed["order"].id, BUYER)
    assert order.is_delivered is True
    assert order.delivered_at is not None
