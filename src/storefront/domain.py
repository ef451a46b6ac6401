"""Storefront bounded context — Catalogue inventory, Shopping Cart and Orders.

Handles the inventory ledger (stock reserved per size/color), the per-customer
shopping cart with its derived totals, and the checkout flow that turns a cart
into an immutable order snapshot.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
