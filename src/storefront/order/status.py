"""Order administration — status transitions and notes."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.management import products_for, save_products
from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    admin_notes = Text()


@storefront.command(part_of="Order")
class AddAdminNotes:
    order_id = Identifier(required=True)
    admin_notes = Text(required=True)


@storefront.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        restockable = order.restockable
        previous = order.change_status(command.status, admin_notes=command.admin_notes)

        products = {}
        if OrderStatus(order.status) == OrderStatus.CANCELLED and restockable:
            products = products_for(order.items)
            for item in order.items:
                products[str(item.product_id)].restock(item.size, item.color, item.quantity)

        save_products(products)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous.value,
            new_status=order.status,
            restocked=bool(products),
        )
        return str(order.id)

    @handle(AddAdminNotes)
    def add_admin_notes(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        order.update_admin_notes(command.admin_notes)
        current_domain.repository_for(Order).add(order)
        return str(order.id)
