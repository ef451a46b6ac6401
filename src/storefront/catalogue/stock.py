"""Inventory ledger operations — commands and handler.

ReserveStock and ReleaseStock are the ledger's direct entry points; the cart
handlers call the same aggregate methods as part of their own unit of work.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class SetInventoryLevel:
    """Set the on-hand quantity of one size/color."""

    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="Product")
class ReserveStock:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ReleaseStock:
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class InventoryLedgerHandler:
    @handle(SetInventoryLevel)
    def set_inventory_level(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.set_stock(size=command.size, color=command.color, quantity=command.quantity)
        current_domain.repository_for(Product).add(product)

    @handle(ReserveStock)
    def reserve_stock(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.reserve_stock(size=command.size, color=command.color, quantity=command.quantity)
        current_domain.repository_for(Product).add(product)

    @handle(ReleaseStock)
    def release_stock(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        product.release_stock(size=command.size, color=command.color, quantity=command.quantity)
        current_domain.repository_for(Product).add(product)
