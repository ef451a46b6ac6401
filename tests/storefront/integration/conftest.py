import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import (
    cart_router,
    maintenance_router,
    order_router,
    product_router,
    register_storefront_handlers,
    wishlist_router,
)

ADMIN = {"X-Customer-Id": "admin-001", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(wishlist_router)
    app.include_router(maintenance_router)
    register_storefront_handlers(app)
    return TestClient(app)


@pytest.fixture()
def product_id(client):
    """A shirt with three units of M/Red and one of L/Blue."""
    response = client.post(
        "/products",
        json={
            "name": "Linen Shirt",
            "category": "shirts",
            "price": 29.99,
            "original_price": 39.99,
            "inventory": [
                {"size": "M", "color": "Red", "quantity": 3},
                {"size": "L", "color": "Blue", "quantity": 1},
            ],
        },
        headers=ADMIN,
    )
    assert response.status_code == 201
    return response.json()["product_id"]
