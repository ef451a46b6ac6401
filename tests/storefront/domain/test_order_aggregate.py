"""Tests for Order placement and the order status state machine."""

import re
from datetime import UTC, datetime, timedelta

import pytest
from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.errors import InvalidOrder, InvalidTransition
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.order.order import Order, OrderStatus, generate_order_number

DETAILS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "555-0100",
    "address": "12 Analytical Way",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
}


def _filled_cart(quantity=2):
    product = Product.create(
        name="Linen Shirt",
        category="shirts",
        price=29.99,
        inventory=[{"size": "M", "color": "Red", "quantity": 10}],
    )
    cart = ShoppingCart.create(customer_id="cust-001")
    cart.add_item(product, "M", "Red", quantity)
    return cart


def _place(cart=None, **overrides):
    kwargs = {
        "customer_id": "cust-001",
        "customer_details": DETAILS,
        "cart": cart or _filled_cart(),
        "order_number": "ORD1700000000000123",
    }
    kwargs.update(overrides)
    return Order.place(**kwargs)


def _order_at(status):
    order = _place()
    path = [OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
    if status == OrderStatus.CANCELLED:
        order.change_status("cancelled")
    else:
        for step in path:
            if OrderStatus(order.status) == status:
                break
            order.change_status(step.value)
    order._events.clear()
    return order


class TestOrderNumber:
    def test_format(self):
        assert re.fullmatch(r"ORD\d{16}", generate_order_number())


class TestPlaceOrder:
    def test_snapshot_copies_cart(self):
        cart = _filled_cart()
        order = _place(cart)
        assert order.subtotal == cart.subtotal
        assert order.tax == cart.tax
        assert order.shipping_cost == cart.shipping.cost
        assert order.total == cart.total
        assert len(order.items) == 1
        item = order.items[0]
        assert (item.size, item.color, item.quantity, item.price) == ("M", "Red", 2, 29.99)

    def test_defaults(self):
        order = _place()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_method == "Cash on Delivery"
        assert order.customer_details.country == "USA"
        assert order.total_items == 2
        assert order.status_display == "Pending Confirmation"

    def test_place_raises_event(self):
        order = _place()
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == "ORD1700000000000123"

    def test_missing_customer_details(self):
        with pytest.raises(InvalidOrder) as exc:
            _place(customer_details=None)
        assert "customer_details" in exc.value.messages

    @pytest.mark.parametrize("details", [list(DETAILS.items()), "Ada Lovelace, Springfield IL"])
    def test_customer_details_must_be_a_mapping(self, details):
        with pytest.raises(InvalidOrder) as exc:
            _place(customer_details=details)
        assert "customer_details" in exc.value.messages

    def test_incomplete_customer_details(self):
        details = {k: v for k, v in DETAILS.items() if k != "email"}
        with pytest.raises(InvalidOrder) as exc:
            _place(customer_details=details)
        assert "email" in exc.value.messages["customer_details"][0]

    def test_empty_cart(self):
        cart = ShoppingCart.create(customer_id="cust-001")
        with pytest.raises(InvalidOrder) as exc:
            _place(cart)
        assert "items" in exc.value.messages

    def test_discounted_order_keeps_discount(self):
        cart = _filled_cart()
        cart.apply_discount("SAVE5", amount=5.0)
        order = _place(cart)
        assert order.discount == 5.0
        assert order.discount_code == "SAVE5"
        assert order.total == 69.78


class TestForwardTransitions:
    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        ],
    )
    def test_next_step_allowed(self, start, target):
        order = _order_at(start)
        previous = order.change_status(target.value)
        assert previous == start
        assert order.status == target.value
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.new_status == target.value

    def test_shipping_sets_estimated_delivery(self):
        order = _order_at(OrderStatus.PROCESSING)
        before = datetime.now(UTC)
        order.change_status("shipped")
        assert order.estimated_delivery >= before + timedelta(days=6)
        assert order.actual_delivery is None

    def test_delivery_sets_actual_delivery(self):
        order = _order_at(OrderStatus.SHIPPED)
        order.change_status("delivered")
        assert order.actual_delivery is not None

    def test_admin_notes_travel_with_transition(self):
        order = _order_at(OrderStatus.PENDING)
        order.change_status("confirmed", admin_notes="Called the customer")
        assert order.admin_notes == "Called the customer"


class TestRejectedTransitions:
    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.PENDING),
            (OrderStatus.CONFIRMED, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.PROCESSING),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        ],
    )
    def test_invalid_jump(self, start, target):
        order = _order_at(start)
        with pytest.raises(InvalidTransition):
            order.change_status(target.value)
        assert order.status == start.value
        assert order._events == []

    def test_unknown_status(self):
        order = _order_at(OrderStatus.PENDING)
        with pytest.raises(InvalidTransition):
            order.change_status("lost")


class TestCancellation:
    @pytest.mark.parametrize(
        "start",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED],
    )
    def test_cancel_from_non_terminal(self, start):
        order = _order_at(start)
        order.change_status("cancelled")
        assert order.status == OrderStatus.CANCELLED.value
        assert isinstance(order._events[-1], OrderCancelled)

    def test_restockable_until_shipped(self):
        assert _order_at(OrderStatus.PROCESSING).restockable
        assert not _order_at(OrderStatus.SHIPPED).restockable

    def test_cancel_event_records_restock(self):
        order = _order_at(OrderStatus.CONFIRMED)
        order.change_status("cancelled")
        assert order._events[-1].restocked is True

        shipped = _order_at(OrderStatus.SHIPPED)
        shipped.change_status("cancelled")
        assert shipped._events[-1].restocked is False


class TestAdminNotes:
    def test_update_admin_notes(self):
        order = _place()
        order.update_admin_notes("Gift wrap")
        assert order.admin_notes == "Gift wrap"
