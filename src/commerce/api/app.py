"""Commerce FastAPI application.

Processes every request synchronously inside the commerce domain context.

Usage:
    uvicorn commerce.api.app:create_app --factory --host 0.0.0.0 --port 8000
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from commerce.api.routes import cart_router, customer_router, order_router, product_router
from commerce.domain import commerce
from commerce.shared.errors import Forbidden, InsufficientStock
from commerce.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def _insufficient_stock_handler(request: Request, exc: InsufficientStock) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": str(exc),
            "product_id": exc.product_id,
            "available": exc.available,
            "requested": exc.requested,
        },
    )


def _forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


def create_app(init_domain: bool = True, log_dir: str | None = "logs") -> FastAPI:
    """Build the API. Pass ``init_domain=False`` when the domain is already initialised."""
    if log_dir:
        configure_logging(log_dir)
    if init_domain:
        commerce.init()

    app = FastAPI(
        title="Commerce API",
        description="Stock ledger, customer directory, carts and orders",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the commerce domain context for each request."""
        with commerce.domain_context():
            return await call_next(request)

    register_exception_handlers(app)
    app.add_exception_handler(InsufficientStock, _insufficient_stock_handler)
    app.add_exception_handler(Forbidden, _forbidden_handler)

    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(customer_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": commerce.name})

    logger.info("API ready", domain=commerce.name)
    return app
