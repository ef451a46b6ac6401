"""Order placement — turn the customer's cart into an order.

Placement happens in one unit of work: the order snapshot is written, every
cart line's reservation is committed on the inventory ledger, and the cart is
cleared. A failure at any step leaves all three untouched.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.management import products_for, save_products
from storefront.domain import storefront
from storefront.errors import InvalidOrder
from storefront.order.order import Order, generate_order_number

logger = structlog.get_logger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_details = Text(required=True)  # JSON: CustomerDetails fields
    payment_method = String(max_length=50)
    customer_notes = Text()


def _unique_order_number():
    repo = current_domain.repository_for(Order)
    for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number()
        if repo.by_order_number(number) is None:
            return number
        logger.warning("Order number collision, regenerating", order_number=number)
    raise InvalidOrder({"order_number": ["Could not allocate a unique order number"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        details = (
            json.loads(command.customer_details)
            if isinstance(command.customer_details, str)
            else command.customer_details
        )

        cart = current_domain.repository_for(ShoppingCart).for_customer(command.customer_id)
        if cart is None or not cart.is_active:
            raise InvalidOrder({"items": ["Cannot place an order from an empty cart"]})

        order = Order.place(
            customer_id=command.customer_id,
            customer_details=details,
            cart=cart,
            order_number=_unique_order_number(),
            payment_method=command.payment_method,
            customer_notes=command.customer_notes,
        )

        products = products_for(cart.items)
        for line in cart.items:
            products[str(line.product_id)].commit_stock(line.size, line.color, line.quantity)
        cart.clear()

        save_products(products)
        current_domain.repository_for(ShoppingCart).add(cart)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total=order.total,
            item_count=order.total_items,
        )
        return str(order.id)
