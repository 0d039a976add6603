"""Pydantic request/response schemas for the commerce API.

These are external contracts, kept separate from the internal Protean
commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str
    postal_code: str
    country: str | None = None


# ---------------------------------------------------------------------------
# Product Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    category: str | None = None
    description: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Pallet Wrap 500mm",
                    "price": 9.99,
                    "stock": 10,
                    "category": "Packaging",
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = None
    price: float | None = Field(ge=0, default=None)
    category: str | None = None
    description: str | None = None


class AdjustStockRequest(BaseModel):
    adjustment: int
    reason: str = "manual-adjustment"
    reason_details: str | None = None


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=0)


class SyncCartItem(BaseModel):
    id: str
    quantity: int


class SyncCartRequest(BaseModel):
    items: list[SyncCartItem]
    mode: str | None = None


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    name: str | None = None
    price: float | None = Field(ge=0, default=None)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemSchema]
    shipping_address: AddressSchema
    payment_method: str | None = None
    # Ignored: the total is always computed from the lines
    total_price: float | None = None
    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Customer Schemas
# ---------------------------------------------------------------------------
class ResolveCustomerRequest(BaseModel):
    email: str | None = None
    name: str | None = None
    phone: str | None = None
    address: AddressSchema | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class StockAdjustedResponse(BaseModel):
    stock: int
    log: dict
