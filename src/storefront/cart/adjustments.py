"""Cart adjustments — discount codes and shipping method selection."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.management import cart_for
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class ApplyCartDiscount:
    customer_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    amount = Float(min_value=0.0)
    percentage = Float(min_value=0.0, max_value=100.0)


@storefront.command(part_of="ShoppingCart")
class RemoveCartDiscount:
    customer_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ChangeShippingMethod:
    customer_id = Identifier(required=True)
    method = String(required=True, max_length=20)


@storefront.command_handler(part_of=ShoppingCart)
class CartAdjustmentsHandler:
    @handle(ApplyCartDiscount)
    def apply_discount(self, command):
        cart, _ = cart_for(command.customer_id)
        cart.apply_discount(code=command.code, amount=command.amount, percentage=command.percentage)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(RemoveCartDiscount)
    def remove_discount(self, command):
        cart, _ = cart_for(command.customer_id)
        cart.remove_discount()
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(ChangeShippingMethod)
    def change_shipping_method(self, command):
        cart, _ = cart_for(command.customer_id)
        cart.update_shipping_method(command.method)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)
