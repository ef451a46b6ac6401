"""Shopper load test scenarios.

Stateful SequentialTaskSet journeys covering cart browsing and abandonment,
the cart-to-order conversion, and an admin walking orders through the status
machine.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    SHIPPING_METHODS,
    cart_item_data,
    catalogue_query,
    checkout_data,
    customer_id,
    discount_data,
    product_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState, ShopperState

ADMIN_HEADERS = {"X-Customer-Id": "admin-loadtest", "X-User-Role": "admin"}


def _create_product(client, state):
    payload = product_data()
    with client.post(
        "/products",
        json=payload,
        headers=ADMIN_HEADERS,
        catch_response=True,
        name="POST /products",
    ) as resp:
        if resp.status_code == 201:
            state.product_id = resp.json()["product_id"]
            state.inventory = payload["inventory"]
            return True
        resp.failure(f"Create product failed: {resp.status_code}: {extract_error_detail(resp)}")
        return False


class CartBrowsingJourney(SequentialTaskSet):
    """Create Product -> Browse -> Add Items -> Update Quantity -> Remove Item -> Clear.

    Models a shopper who fills a cart, changes their mind, and leaves. Every
    cart step moves reservations on the inventory ledger.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = {"X-Customer-Id": self.state.customer_id}

    @task
    def create_product(self):
        if not _create_product(self.client, self.state):
            self.interrupt()

    @task
    def browse_catalogue(self):
        with self.client.get(
            "/products",
            params=catalogue_query(),
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Browse failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def add_items(self):
        for entry in self.state.inventory[:2]:
            with self.client.post(
                "/cart/items",
                json=cart_item_data(self.state.product_id, entry, quantity=random.randint(1, 3)),
                headers=self.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code == 200:
                    self.state.item_ids = [item["id"] for item in resp.json()["items"]]
                else:
                    resp.failure(f"Add cart item failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def update_quantity(self):
        if not self.state.item_ids:
            return
        with self.client.patch(
            f"/cart/items/{self.state.item_ids[0]}",
            json={"quantity": random.randint(1, 4)},
            headers=self.headers,
            catch_response=True,
            name="PATCH /cart/items/{id}",
        ) as resp:
            if resp.status_code not in (200, 409):
                resp.failure(f"Update quantity failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def read_summary(self):
        self.client.get("/cart/summary", headers=self.headers, name="GET /cart/summary")

    @task
    def remove_item(self):
        if len(self.state.item_ids) < 2:
            return
        with self.client.delete(
            f"/cart/items/{self.state.item_ids[-1]}",
            headers=self.headers,
            catch_response=True,
            name="DELETE /cart/items/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Remove item failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def clear_cart(self):
        with self.client.delete("/cart", headers=self.headers, catch_response=True, name="DELETE /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"Clear cart failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutJourney(SequentialTaskSet):
    """Create Product -> Add Item -> Discount -> Shipping -> Place Order -> My Orders.

    The conversion path: the cart turns into an order, the reservation is
    committed and the cart empties.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = {"X-Customer-Id": self.state.customer_id}

    @task
    def create_product(self):
        if not _create_product(self.client, self.state):
            self.interrupt()

    @task
    def add_item(self):
        entry = self.state.inventory[0]
        with self.client.post(
            "/cart/items",
            json=cart_item_data(self.state.product_id, entry, quantity=random.randint(1, 2)),
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Add cart item failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def apply_discount(self):
        if random.random() < 0.4:
            self.client.post("/cart/discount", json=discount_data(), headers=self.headers, name="POST /cart/discount")

    @task
    def choose_shipping(self):
        self.client.put(
            "/cart/shipping",
            json={"method": random.choice(SHIPPING_METHODS)},
            headers=self.headers,
            name="PUT /cart/shipping",
        )

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.order_number = resp.json()["order_number"]
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def my_orders(self):
        self.client.get("/orders/mine", headers=self.headers, name="GET /orders/mine")

    @task
    def done(self):
        self.interrupt()


class OrderFulfilmentJourney(SequentialTaskSet):
    """Checkout -> Confirm -> Process -> Ship -> Deliver, or cancel early.

    An admin moves a freshly placed order through the state machine; one in
    five orders is cancelled before shipping, which restocks the ledger.
    """

    def on_start(self):
        self.shopper = ShopperState(customer_id=customer_id())
        self.headers = {"X-Customer-Id": self.shopper.customer_id}
        self.state = OrderState()

    @task
    def checkout(self):
        if not _create_product(self.client, self.shopper):
            self.interrupt()
        self.client.post(
            "/cart/items",
            json=cart_item_data(self.shopper.product_id, self.shopper.inventory[0]),
            headers=self.headers,
            name="POST /cart/items",
        )
        resp = self.client.post("/orders", json=checkout_data(), headers=self.headers, name="POST /orders")
        if resp.status_code != 201:
            self.interrupt()
        self.state.order_id = resp.json()["order_id"]

    def _move(self, status):
        with self.client.put(
            f"/orders/admin/{self.state.order_id}/status",
            json={"status": status},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name=f"PUT /orders/admin/{{id}}/status [{status}]",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def confirm(self):
        self._move("confirmed")

    @task
    def process_or_cancel(self):
        if random.random() < 0.2:
            self._move("cancelled")
            self.interrupt()
        self._move("processing")

    @task
    def ship(self):
        self._move("shipped")

    @task
    def deliver(self):
        self._move("delivered")

    @task
    def done(self):
        self.interrupt()
