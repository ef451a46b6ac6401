"""Mixed storefront workload scenario.

Combines the shopper and admin journeys with weights that model realistic
storefront traffic. This is the recommended scenario for load baseline
testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.shopping import (
    CartBrowsingJourney,
    CheckoutJourney,
    OrderFulfilmentJourney,
)


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload simulating concurrent storefront activity.

    - Cart browsing and abandonment: most common (60%)
    - Checkout conversion (30%)
    - Admin order fulfilment (10%)
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        CartBrowsingJourney: 6,
        CheckoutJourney: 3,
        OrderFulfilmentJourney: 1,
    }
