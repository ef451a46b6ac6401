"""Product management — commands and handler for authoring the catalogue."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=100)
    description = Text()
    category = String(required=True, max_length=50)
    brand = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)
    inventory = Text()  # JSON: list of {size, color, quantity}


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        inventory = json.loads(command.inventory) if isinstance(command.inventory, str) else command.inventory
        product = Product.create(
            name=command.name,
            description=command.description,
            category=command.category,
            brand=command.brand,
            price=command.price,
            original_price=command.original_price,
            inventory=inventory or [],
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.change_price(price=command.price, original_price=command.original_price)
        current_domain.repository_for(Product).add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.deactivate()
        current_domain.repository_for(Product).add(product)
