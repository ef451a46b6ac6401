"""Last-unit contention scenario.

Many shoppers race for a handful of units of one product variant. Exactly as
many add-to-cart requests as there are units may succeed; every other request
must fail with 409 and never oversell. The ledger is checked at the end of
the run.
"""

import logging

import requests
from locust import HttpUser, between, events, task

from loadtests.data_generators import customer_id, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.shopping import ADMIN_HEADERS

logger = logging.getLogger("loadtest")

UNITS = 5
VARIANT = {"size": "M", "color": "Black"}

_shared = {"product_id": None}


@events.test_start.add_listener
def create_contended_product(environment, **_kwargs):
    """Create the single product every contention user competes for."""
    if environment.host is None:
        return

    resp = requests.post(
        f"{environment.host}/products",
        json=product_data(inventory=[{**VARIANT, "quantity": UNITS}]),
        headers=ADMIN_HEADERS,
        timeout=10,
    )
    if resp.status_code == 201:
        _shared["product_id"] = resp.json()["product_id"]
        logger.info("Contended product %s created with %d units", _shared["product_id"], UNITS)
    else:
        logger.error("Could not create contended product: %s", extract_error_detail(resp))


class LastUnitContentionUser(HttpUser):
    """Every user tries to put one unit of the contended variant in their cart."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = {"X-Customer-Id": customer_id()}

    @task
    def grab_last_unit(self):
        if _shared["product_id"] is None:
            return
        with self.client.post(
            "/cart/items",
            json={"product_id": _shared["product_id"], **VARIANT, "quantity": 1},
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items [contended]",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Unexpected: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def check_availability(self):
        if _shared["product_id"] is None:
            return
        with self.client.get(
            f"/products/{_shared['product_id']}/availability",
            params=VARIANT,
            catch_response=True,
            name="GET /products/{id}/availability [contended]",
        ) as resp:
            if resp.status_code == 200 and resp.json()["available"] < 0:
                resp.failure("Ledger oversold: negative availability")
