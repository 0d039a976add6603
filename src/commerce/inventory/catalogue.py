"""Product catalogue — registration, detail updates and removal."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from commerce.domain import commerce
from commerce.inventory.movements import apply_adjustment
from commerce.inventory.product import Product, StockChangeReason

logger = structlog.get_logger(__name__)

INITIAL_STOCK_DETAIL = "Initial inventory"


@commerce.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    initial_stock = Integer(default=0, min_value=0)
    category = String(max_length=100)
    description = Text()
    actor_id = Identifier(required=True)


@commerce.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    price = Float(min_value=0.0)
    category = String(max_length=100)
    description = Text()


@commerce.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@commerce.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            price=command.price,
            category=command.category,
            description=command.description,
        )
        if command.initial_stock:
            apply_adjustment(
                product,
                change=command.initial_stock,
                reason=StockChangeReason.MANUAL_ADJUSTMENT,
                actor_id=command.actor_id,
                detail=INITIAL_STOCK_DETAIL,
            )
        else:
            current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            price=command.price,
            category=command.category,
            description=command.description,
        )
        repo.add(product)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("Product removed", product_id=str(product.id), stock=product.stock)
