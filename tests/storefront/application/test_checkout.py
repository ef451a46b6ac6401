"""Application tests for placing orders from the customer's cart."""

import json

import pytest
from protean import current_domain
from storefront.cart.adjustments import ApplyCartDiscount
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalogue.management import ChangeProductPrice, CreateProduct
from storefront.catalogue.product import Product
from storefront.errors import InvalidOrder
from storefront.order.order import Order, OrderStatus
from storefront.order.placement import PlaceOrder

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


def _create_product(quantity=5, price=29.99):
    return current_domain.process(
        CreateProduct(
            name="Linen Shirt",
            category="shirts",
            price=price,
            inventory=json.dumps([{"size": "M", "color": "Red", "quantity": quantity}]),
        ),
        asynchronous=False,
    )


def _add(product_id, quantity=2, customer_id="cust-001"):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, size="M", color="Red", quantity=quantity),
        asynchronous=False,
    )


def _place(customer_id="cust-001", details=None, **extra):
    return current_domain.process(
        PlaceOrder(customer_id=customer_id, customer_details=json.dumps(details or DETAILS), **extra),
        asynchronous=False,
    )


def _record(product_id):
    return current_domain.repository_for(Product).get(product_id).record_for("M", "Red")


class TestPlaceOrder:
    def test_order_snapshots_cart(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        cart = current_domain.repository_for(ShoppingCart).for_customer("cust-001")
        expected = (cart.subtotal, cart.tax, cart.shipping.cost, cart.total)

        order_id = _place(customer_notes="Leave at the door")
        order = current_domain.repository_for(Order).get(order_id)

        assert (order.subtotal, order.tax, order.shipping_cost, order.total) == expected
        assert order.status == OrderStatus.PENDING.value
        assert order.customer_notes == "Leave at the door"
        assert order.order_number.startswith("ORD")
        assert [(i.size, i.color, i.quantity, i.price) for i in order.items] == [("M", "Red", 2, 29.99)]

    def test_placement_commits_stock(self):
        product_id = _create_product(quantity=5)
        _add(product_id, quantity=2)
        _place()
        record = _record(product_id)
        assert record.quantity == 3
        assert record.reserved == 0

    def test_placement_clears_cart(self):
        product_id = _create_product()
        _add(product_id)
        current_domain.process(ApplyCartDiscount(customer_id="cust-001", code="SAVE5", amount=5.0), asynchronous=False)
        _place()
        cart = current_domain.repository_for(ShoppingCart).for_customer("cust-001")
        assert len(cart.items) == 0
        assert cart.total == 0.0
        assert cart.discount is None

    def test_payment_method(self):
        product_id = _create_product()
        _add(product_id)
        order = current_domain.repository_for(Order).get(_place(payment_method="Card"))
        assert order.payment_method == "Card"

    def test_empty_cart_rejected(self):
        with pytest.raises(InvalidOrder):
            _place()
        assert current_domain.repository_for(Order).for_customer("cust-001") == []

    def test_incomplete_details_change_nothing(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        details = {k: v for k, v in DETAILS.items() if k != "phone"}

        with pytest.raises(InvalidOrder):
            _place(details=details)

        cart = current_domain.repository_for(ShoppingCart).for_customer("cust-001")
        assert cart.items[0].quantity == 2
        assert _record(product_id).reserved == 2
        assert current_domain.repository_for(Order).for_customer("cust-001") == []

    def test_details_decoding_to_a_list_are_rejected(self):
        product_id = _create_product()
        _add(product_id, quantity=1)

        with pytest.raises(InvalidOrder) as exc:
            _place(details=[DETAILS])

        assert "customer_details" in exc.value.messages
        assert _record(product_id).reserved == 1
        assert current_domain.repository_for(Order).for_customer("cust-001") == []


class TestOrderSnapshotImmutability:
    def test_price_change_does_not_touch_placed_order(self):
        product_id = _create_product(price=29.99)
        _add(product_id, quantity=1)
        order_id = _place()

        current_domain.process(ChangeProductPrice(product_id=product_id, price=39.99), asynchronous=False)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.items[0].price == 29.99
        assert current_domain.repository_for(Product).get(product_id).price == 39.99

    def test_price_change_does_not_touch_cart_line(self):
        product_id = _create_product(price=29.99)
        _add(product_id, quantity=1)
        current_domain.process(ChangeProductPrice(product_id=product_id, price=39.99), asynchronous=False)
        cart = current_domain.repository_for(ShoppingCart).for_customer("cust-001")
        assert cart.items[0].price == 29.99


class TestOrderQueries:
    def test_orders_for_customer_newest_first(self):
        product_id = _create_product(quantity=10)
        _add(product_id, quantity=1)
        first = _place()
        _add(product_id, quantity=2)
        second = _place()

        orders = current_domain.repository_for(Order).for_customer("cust-001")
        assert [str(o.id) for o in orders] == [second, first]

    def test_lookup_by_order_number(self):
        product_id = _create_product()
        _add(product_id)
        order = current_domain.repository_for(Order).get(_place())
        found = current_domain.repository_for(Order).by_order_number(order.order_number)
        assert str(found.id) == str(order.id)
        assert current_domain.repository_for(Order).by_order_number("ORD-missing") is None
