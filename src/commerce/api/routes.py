"""FastAPI endpoints for products, carts, orders and customers.

Callers identify themselves with ``X-Account-Id``; ``X-Account-Role`` marks
privileged staff, who may manage stock and read every order.
"""

from fastapi import APIRouter, Header

from commerce.api.schemas import (
    AddToCartRequest,
    AdjustStockRequest,
    CreateOrderRequest,
    CreateProductRequest,
    ResolveCustomerRequest,
    StockAdjustedResponse,
    SyncCartRequest,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from commerce.cart import store
from commerce.customers import directory
from commerce.inventory import ledger
from commerce.orders import workflow
from commerce.shared.errors import Forbidden
from commerce.utils.settings import privileged_roles

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
customer_router = APIRouter(prefix="/customers", tags=["customers"])


def _is_privileged(role: str) -> bool:
    return bool(role) and role.strip().lower() in privileged_roles()


def _require_privileged(role: str) -> None:
    if not _is_privileged(role):
        raise Forbidden("This operation requires a privileged role")


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201)
async def create_product(
    body: CreateProductRequest,
    x_account_id: str = Header(),
    x_account_role: str = Header(default=""),
) -> dict:
    _require_privileged(x_account_role)
    product = ledger.register_product(
        name=body.name,
        price=body.price,
        actor_id=x_account_id,
        stock=body.stock,
        category=body.category,
        description=body.description,
    )
    return product.to_dict()


@product_router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    x_account_role: str = Header(default=""),
) -> dict:
    _require_privileged(x_account_role)
    product = ledger.update_product(
        product_id,
        name=body.name,
        price=body.price,
        category=body.category,
        description=body.description,
    )
    return product.to_dict()


@product_router.get("")
async def list_products(category: str | None = None) -> list[dict]:
    return [product.to_dict() for product in ledger.list_products(category=category)]


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return ledger.get_product(product_id).to_dict()


@product_router.delete("/{product_id}", status_code=204)
async def remove_product(product_id: str, x_account_role: str = Header(default="")) -> None:
    _require_privileged(x_account_role)
    ledger.remove_product(product_id)


@product_router.put("/{product_id}/stock", response_model=StockAdjustedResponse)
async def adjust_stock(
    product_id: str,
    body: AdjustStockRequest,
    x_account_id: str = Header(),
    x_account_role: str = Header(default=""),
) -> StockAdjustedResponse:
    _require_privileged(x_account_role)
    stock, entry = ledger.record_adjustment(
        product_id,
        body.adjustment,
        actor_id=x_account_id,
        reason=body.reason,
        detail=body.reason_details,
    )
    return StockAdjustedResponse(stock=stock, log=entry.to_dict())


@product_router.get("/{product_id}/logs")
async def list_stock_logs(product_id: str, x_account_role: str = Header(default="")) -> list[dict]:
    _require_privileged(x_account_role)
    return [entry.to_dict() for entry in ledger.list_logs(product_id)]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@cart_router.get("")
async def get_cart(x_account_id: str = Header()) -> dict:
    return store.get(x_account_id).to_dict()


@cart_router.post("")
async def add_to_cart(body: AddToCartRequest, x_account_id: str = Header()) -> dict:
    return store.add_item(x_account_id, body.product_id, body.quantity).to_dict()


@cart_router.put("/{product_id}")
async def update_cart_item(product_id: str, body: UpdateCartQuantityRequest, x_account_id: str = Header()) -> dict:
    return store.set_item_quantity(x_account_id, product_id, body.quantity).to_dict()


@cart_router.delete("/{product_id}")
async def remove_cart_item(product_id: str, x_account_id: str = Header()) -> dict:
    return store.remove_item(x_account_id, product_id).to_dict()


@cart_router.delete("")
async def clear_cart(x_account_id: str = Header()) -> dict:
    return store.clear(x_account_id).to_dict()


@cart_router.post("/sync")
async def sync_cart(body: SyncCartRequest, x_account_id: str = Header()) -> dict:
    items = [{"product_id": item.id, "quantity": item.quantity} for item in body.items]
    return store.merge(x_account_id, items, mode=body.mode).to_dict()


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, x_account_id: str = Header()) -> dict:
    order = workflow.create_order(
        x_account_id,
        items=[item.model_dump(exclude_none=True) for item in body.items],
        shipping_address=body.shipping_address.model_dump(exclude_none=True),
        payment_method=body.payment_method,
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
    )
    return order.to_dict()


@order_router.get("")
async def list_orders(status: str | None = None, x_account_role: str = Header(default="")) -> list[dict]:
    _require_privileged(x_account_role)
    return [order.to_dict() for order in workflow.list_orders(status=status)]


@order_router.get("/mine")
async def my_orders(x_account_id: str = Header()) -> list[dict]:
    return [order.to_dict() for order in workflow.orders_for_account(x_account_id)]


@order_router.get("/{order_id}")
async def get_order(order_id: str, x_account_id: str = Header(), x_account_role: str = Header(default="")) -> dict:
    order = workflow.get_order(order_id, x_account_id, privileged=_is_privileged(x_account_role))
    return order.to_dict()


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    x_account_role: str = Header(default=""),
) -> dict:
    _require_privileged(x_account_role)
    return workflow.update_status(order_id, body.status).to_dict()


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
@customer_router.post("/resolve")
async def resolve_customer(body: ResolveCustomerRequest, x_account_id: str = Header()) -> dict:
    customer = directory.resolve(
        x_account_id,
        email=body.email,
        name=body.name,
        phone=body.phone,
        address=body.address.model_dump(exclude_none=True) if body.address else None,
    )
    return customer.to_dict()


@customer_router.get("/me")
async def my_customer(x_account_id: str = Header()) -> dict:
    customer = directory.customer_for_account(x_account_id)
    if customer is None:
        return {}
    return customer.to_dict()
