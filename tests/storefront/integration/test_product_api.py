"""Integration tests for product endpoints via TestClient."""

from protean import current_domain
from storefront.catalogue.product import Product

ADMIN = {"X-Customer-Id": "admin-001", "X-User-Role": "admin"}
CUSTOMER = {"X-Customer-Id": "cust-001"}


class TestCreateProduct:
    def test_admin_creates_product(self, client, product_id):
        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Linen Shirt"
        assert product.total_stock == 4

    def test_customer_cannot_create_product(self, client):
        response = client.post(
            "/products",
            json={"name": "Tee", "category": "shirts", "price": 9.99},
            headers=CUSTOMER,
        )
        assert response.status_code == 403


class TestReadProduct:
    def test_get_product(self, client, product_id):
        response = client.get(f"/products/{product_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["in_stock"] is True
        assert body["available_stock"] == 4
        assert {(r["size"], r["color"]) for r in body["inventory"]} == {("M", "Red"), ("L", "Blue")}

    def test_unknown_product(self, client):
        response = client.get("/products/prod-404")
        assert response.status_code == 404

    def test_availability(self, client, product_id):
        response = client.get(f"/products/{product_id}/availability", params={"size": "M", "color": "Red"})
        assert response.status_code == 200
        assert response.json()["available"] == 3
        assert response.json()["is_available"] is True

    def test_availability_of_unknown_variant(self, client, product_id):
        response = client.get(f"/products/{product_id}/availability", params={"size": "XL", "color": "Red"})
        assert response.json()["available"] == 0
        assert response.json()["is_available"] is False


class TestAdminProductUpdates:
    def test_change_price(self, client, product_id):
        response = client.put(f"/products/{product_id}/price", json={"price": 24.99}, headers=ADMIN)
        assert response.status_code == 200
        assert current_domain.repository_for(Product).get(product_id).price == 24.99

    def test_set_inventory(self, client, product_id):
        response = client.put(
            f"/products/{product_id}/inventory",
            json={"size": "S", "color": "Green", "quantity": 7},
            headers=ADMIN,
        )
        assert response.status_code == 200
        product = current_domain.repository_for(Product).get(product_id)
        assert product.available_for("S", "Green") == 7

    def test_customer_cannot_set_inventory(self, client, product_id):
        response = client.put(
            f"/products/{product_id}/inventory",
            json={"size": "M", "color": "Red", "quantity": 100},
            headers=CUSTOMER,
        )
        assert response.status_code == 403


def _create(client, name, price, category="shirts"):
    response = client.post(
        "/products",
        json={
            "name": name,
            "category": category,
            "price": price,
            "inventory": [{"size": "M", "color": "Red", "quantity": 2}],
        },
        headers=ADMIN,
    )
    return response.json()["product_id"]


class TestListProducts:
    def test_listing_is_public_and_paginated(self, client, product_id):
        _create(client, "Oxford Shirt", 49.99)
        _create(client, "Slim Chino", 59.99, category="trousers")

        response = client.get("/products", params={"limit": 2, "sort_by": "price", "sort_order": "asc"})

        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body["products"]] == ["Linen Shirt", "Oxford Shirt"]
        assert body["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total_products": 3,
            "has_next_page": True,
            "has_prev_page": False,
        }

    def test_comma_separated_sizes_and_colors(self, client, product_id):
        _create(client, "Oxford Shirt", 49.99)

        response = client.get("/products", params={"sizes": "L, XL", "colors": "Blue"})

        assert [p["id"] for p in response.json()["products"]] == [product_id]

    def test_category_search_and_price_filters(self, client, product_id):
        _create(client, "Linen Trousers", 39.99, category="trousers")

        response = client.get(
            "/products",
            params={"category": "trousers", "search": "linen", "min_price": 30, "max_price": 40},
        )

        assert [p["name"] for p in response.json()["products"]] == ["Linen Trousers"]

    def test_on_sale(self, client, product_id):
        _create(client, "Oxford Shirt", 49.99)
        response = client.get("/products", params={"on_sale": "true"})
        assert [p["id"] for p in response.json()["products"]] == [product_id]

    def test_invalid_paging_and_sorting_are_rejected(self, client):
        assert client.get("/products", params={"page": 0}).status_code == 422
        assert client.get("/products", params={"limit": 500}).status_code == 422
        assert client.get("/products", params={"sort_by": "stock"}).status_code == 422


class TestDeleteProduct:
    def test_admin_withdraws_product(self, client, product_id):
        response = client.delete(f"/products/{product_id}", headers=ADMIN)

        assert response.status_code == 200
        assert current_domain.repository_for(Product).get(product_id).is_active is False
        assert client.get("/products").json()["pagination"]["total_products"] == 0
        # Still readable for carts and orders that reference it
        assert client.get(f"/products/{product_id}").status_code == 200

    def test_customer_cannot_delete(self, client, product_id):
        response = client.delete(f"/products/{product_id}", headers=CUSTOMER)
        assert response.status_code == 403
        assert current_domain.repository_for(Product).get(product_id).is_active is True

    def test_unknown_product(self, client):
        assert client.delete("/products/prod-404", headers=ADMIN).status_code == 404

    def test_second_delete_is_rejected(self, client, product_id):
        client.delete(f"/products/{product_id}", headers=ADMIN)
        assert client.delete(f"/products/{product_id}", headers=ADMIN).status_code == 400

    def test_withdrawn_product_cannot_be_added_to_a_cart(self, client, product_id):
        client.delete(f"/products/{product_id}", headers=ADMIN)
        response = client.post(
            "/cart/items",
            json={"product_id": product_id, "size": "M", "color": "Red", "quantity": 1},
            headers=CUSTOMER,
        )
        assert response.status_code == 400
