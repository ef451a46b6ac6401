"""Application tests for cart commands and their effect on the inventory ledger."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.adjustments import ApplyCartDiscount, ChangeShippingMethod, RemoveCartDiscount
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import (
    AddToCart,
    RemoveCartItemById,
    RemoveFromCart,
    UpdateCartItem,
    UpdateCartItemById,
)
from storefront.cart.management import ClearCart, GetOrCreateCart
from storefront.catalogue.management import CreateProduct, DeactivateProduct
from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, ItemNotFound, OutOfStock


def _create_product(quantity=5, price=29.99):
    return current_domain.process(
        CreateProduct(
            name="Linen Shirt",
            category="shirts",
            price=price,
            inventory=json.dumps(
                [
                    {"size": "M", "color": "Red", "quantity": quantity},
                    {"size": "L", "color": "Blue", "quantity": quantity},
                ]
            ),
        ),
        asynchronous=False,
    )


def _add(product_id, quantity=1, customer_id="cust-001", size="M", color="Red"):
    return current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, size=size, color=color, quantity=quantity),
        asynchronous=False,
    )


def _cart(customer_id="cust-001"):
    return current_domain.repository_for(ShoppingCart).for_customer(customer_id)


def _reserved(product_id, size="M", color="Red"):
    return current_domain.repository_for(Product).get(product_id).record_for(size, color).reserved


class TestGetOrCreateCart:
    def test_cart_created_lazily(self):
        assert _cart() is None
        cart_id = current_domain.process(GetOrCreateCart(customer_id="cust-001"), asynchronous=False)
        assert str(_cart().id) == cart_id

    def test_one_cart_per_customer(self):
        first = current_domain.process(GetOrCreateCart(customer_id="cust-001"), asynchronous=False)
        second = current_domain.process(GetOrCreateCart(customer_id="cust-001"), asynchronous=False)
        assert first == second


class TestAddToCart:
    def test_add_reserves_stock(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        cart = _cart()
        assert cart.items[0].quantity == 2
        assert cart.total == 74.78
        assert _reserved(product_id) == 2

    def test_add_merges_and_reserves_again(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        _add(product_id, quantity=1)
        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert _reserved(product_id) == 3

    def test_insufficient_stock_leaves_state_unchanged(self):
        product_id = _create_product(quantity=2)
        _add(product_id, quantity=2)
        with pytest.raises(InsufficientStock):
            _add(product_id, quantity=1)
        assert _cart().items[0].quantity == 2
        assert _reserved(product_id) == 2

    def test_unknown_variant(self):
        product_id = _create_product()
        with pytest.raises(OutOfStock):
            _add(product_id, size="XXL", color="Gold")

    def test_inactive_product(self):
        product_id = _create_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        with pytest.raises(ValidationError):
            _add(product_id)


class TestUpdateCartItem:
    def test_increase_reserves_delta(self):
        product_id = _create_product()
        _add(product_id, quantity=1)
        current_domain.process(
            UpdateCartItem(customer_id="cust-001", product_id=product_id, size="M", color="Red", quantity=4),
            asynchronous=False,
        )
        assert _cart().items[0].quantity == 4
        assert _reserved(product_id) == 4

    def test_decrease_releases_delta(self):
        product_id = _create_product()
        _add(product_id, quantity=4)
        current_domain.process(
            UpdateCartItem(customer_id="cust-001", product_id=product_id, size="M", color="Red", quantity=1),
            asynchronous=False,
        )
        assert _reserved(product_id) == 1

    def test_increase_beyond_stock(self):
        product_id = _create_product(quantity=3)
        _add(product_id, quantity=1)
        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartItem(customer_id="cust-001", product_id=product_id, size="M", color="Red", quantity=4),
                asynchronous=False,
            )
        assert _cart().items[0].quantity == 1
        assert _reserved(product_id) == 1

    def test_zero_removes_line_and_releases(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        current_domain.process(
            UpdateCartItem(customer_id="cust-001", product_id=product_id, size="M", color="Red", quantity=0),
            asynchronous=False,
        )
        assert len(_cart().items) == 0
        assert _reserved(product_id) == 0

    def test_update_by_id(self):
        product_id = _create_product()
        _add(product_id, quantity=1)
        item_id = str(_cart().items[0].id)
        current_domain.process(
            UpdateCartItemById(customer_id="cust-001", item_id=item_id, quantity=3),
            asynchronous=False,
        )
        assert _reserved(product_id) == 3

    def test_unknown_line(self):
        product_id = _create_product()
        with pytest.raises(ItemNotFound):
            current_domain.process(
                UpdateCartItem(customer_id="cust-001", product_id=product_id, size="M", color="Red", quantity=1),
                asynchronous=False,
            )


class TestRemoveAndClear:
    def test_remove_releases_reservation(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        current_domain.process(
            RemoveFromCart(customer_id="cust-001", product_id=product_id, size="M", color="Red"),
            asynchronous=False,
        )
        assert len(_cart().items) == 0
        assert _reserved(product_id) == 0

    def test_remove_by_id(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        item_id = str(_cart().items[0].id)
        current_domain.process(RemoveCartItemById(customer_id="cust-001", item_id=item_id), asynchronous=False)
        assert _reserved(product_id) == 0

    def test_remove_unknown_id(self):
        with pytest.raises(ItemNotFound):
            current_domain.process(RemoveCartItemById(customer_id="cust-001", item_id="nope"), asynchronous=False)

    def test_clear_releases_every_line(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        _add(product_id, quantity=3, size="L", color="Blue")
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)

        cart = _cart()
        assert len(cart.items) == 0
        assert cart.total == 0.0
        assert _reserved(product_id) == 0
        assert _reserved(product_id, "L", "Blue") == 0

    def test_clear_twice(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)
        assert _cart().total == 0.0
        assert _reserved(product_id) == 0


class TestAdjustments:
    def test_apply_and_remove_discount(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        current_domain.process(
            ApplyCartDiscount(customer_id="cust-001", code="TEN", percentage=10),
            asynchronous=False,
        )
        assert _cart().discount.amount == 6.0

        current_domain.process(RemoveCartDiscount(customer_id="cust-001"), asynchronous=False)
        assert _cart().discount is None
        assert _cart().total == 74.78

    def test_change_shipping_method(self):
        product_id = _create_product()
        _add(product_id, quantity=2)
        current_domain.process(ChangeShippingMethod(customer_id="cust-001", method="overnight"), asynchronous=False)
        cart = _cart()
        assert cart.shipping.method == "overnight"
        assert cart.shipping.cost == 50.0
        assert cart.total == 114.78
