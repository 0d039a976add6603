"""Commerce HTTP API package."""

from commerce.api.routes import cart_router, customer_router, order_router, product_router

__all__ = ["product_router", "cart_router", "order_router", "customer_router"]
