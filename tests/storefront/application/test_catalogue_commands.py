"""Application tests for product and inventory ledger commands."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.catalogue.management import ChangeProductPrice, CreateProduct, DeactivateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.stock import ReleaseStock, ReserveStock, SetInventoryLevel
from storefront.errors import InsufficientStock


def _create_product(quantity=5, **overrides):
    defaults = {
        "name": "Linen Shirt",
        "category": "shirts",
        "price": 29.99,
        "inventory": json.dumps([{"size": "M", "color": "Red", "quantity": quantity}]),
    }
    defaults.update(overrides)
    return current_domain.process(CreateProduct(**defaults), asynchronous=False)


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestCreateProduct:
    def test_create_persists_with_inventory(self):
        product_id = _create_product()
        product = _product(product_id)
        assert product.name == "Linen Shirt"
        assert product.record_for("M", "Red").quantity == 5

    def test_get_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            _product("prod-missing")


class TestPriceAndLifecycle:
    def test_change_price(self):
        product_id = _create_product()
        before = _product(product_id)._version
        current_domain.process(
            ChangeProductPrice(product_id=product_id, price=24.99, original_price=29.99),
            asynchronous=False,
        )
        product = _product(product_id)
        assert product.price == 24.99
        assert product._version == before + 1

    def test_deactivate(self):
        product_id = _create_product()
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert _product(product_id).is_active is False


class TestLedgerCommands:
    def test_set_inventory_level(self):
        product_id = _create_product()
        current_domain.process(
            SetInventoryLevel(product_id=product_id, size="M", color="Red", quantity=12),
            asynchronous=False,
        )
        assert _product(product_id).record_for("M", "Red").quantity == 12

    def test_reserve_and_release(self):
        product_id = _create_product()
        current_domain.process(
            ReserveStock(product_id=product_id, size="M", color="Red", quantity=3),
            asynchronous=False,
        )
        assert _product(product_id).record_for("M", "Red").reserved == 3

        current_domain.process(
            ReleaseStock(product_id=product_id, size="M", color="Red", quantity=3),
            asynchronous=False,
        )
        assert _product(product_id).record_for("M", "Red").reserved == 0

    def test_failed_reservation_leaves_ledger_unchanged(self):
        product_id = _create_product(quantity=2)
        before = _product(product_id)._version
        with pytest.raises(InsufficientStock):
            current_domain.process(
                ReserveStock(product_id=product_id, size="M", color="Red", quantity=3),
                asynchronous=False,
            )
        product = _product(product_id)
        assert product.record_for("M", "Red").reserved == 0
        assert product._version == before
