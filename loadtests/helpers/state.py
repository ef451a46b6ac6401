"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user
sharing. State tracks ids returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated shopper from browsing to checkout."""

    customer_id: str | None = None
    product_id: str | None = None
    inventory: list[dict] = field(default_factory=list)
    item_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    order_number: str | None = None


@dataclass
class OrderState:
    """Tracks an order being walked through the admin status machine."""

    order_id: str | None = None
    current_status: str = "pending"
