"""Cart item management — commands and handler.

Every change to a line's quantity is mirrored on the product's inventory
ledger within the same unit of work: growth reserves the difference, shrinkage
and removal release it.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.management import cart_for
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    """Set a line's quantity, addressed by product variant. Zero removes it."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItemById:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)


@storefront.command(part_of="ShoppingCart")
class RemoveCartItemById:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart, _ = cart_for(command.customer_id)
        product = current_domain.repository_for(Product).get(command.product_id)

        if not product.is_active:
            raise ValidationError({"product_id": [f"{product.name} is no longer available"]})

        product.reserve_stock(command.size, command.color, command.quantity)
        line = cart.add_item(product, command.size, command.color, command.quantity)

        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Added to cart",
            cart_id=str(cart.id),
            product_id=str(product.id),
            size=command.size,
            color=command.color,
            quantity=command.quantity,
            line_quantity=line.quantity,
        )
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart, _ = cart_for(command.customer_id)
        line = cart.line_for(command.product_id, command.size, command.color)
        return self._set_quantity(cart, line, command.quantity)

    @handle(UpdateCartItemById)
    def update_cart_item_by_id(self, command):
        cart, _ = cart_for(command.customer_id)
        line = cart.line_by_id(command.item_id)
        return self._set_quantity(cart, line, command.quantity)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart, _ = cart_for(command.customer_id)
        line = cart.line_for(command.product_id, command.size, command.color)
        return self._remove(cart, line)

    @handle(RemoveCartItemById)
    def remove_cart_item_by_id(self, command):
        cart, _ = cart_for(command.customer_id)
        line = cart.line_by_id(command.item_id)
        return self._remove(cart, line)

    def _set_quantity(self, cart, line, quantity):
        if quantity <= 0:
            return self._remove(cart, line)

        product = current_domain.repository_for(Product).get(line.product_id)
        delta = quantity - line.quantity
        if delta > 0:
            product.reserve_stock(line.size, line.color, delta)
        elif delta < 0:
            product.release_stock(line.size, line.color, -delta)

        cart.update_item_quantity_by_id(line.id, quantity)
        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    def _remove(self, cart, line):
        product = current_domain.repository_for(Product).get(line.product_id)
        product.release_stock(line.size, line.color, line.quantity)
        cart.remove_item_by_id(line.id)

        current_domain.repository_for(Product).add(product)
        current_domain.repository_for(ShoppingCart).add(cart)
        logger.info(
            "Removed from cart",
            cart_id=str(cart.id),
            product_id=str(line.product_id),
            quantity=line.quantity,
        )
        return str(cart.id)
