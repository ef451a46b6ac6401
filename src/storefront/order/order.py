"""Order aggregate (CQRS) — the immutable snapshot a cart turns into.

Items, prices and totals are copied from the cart at placement time and never
change afterwards, whatever happens to the catalogue. The only mutations an
order accepts are administrative: status transitions and notes.

State Machine:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from any non-terminal state)
"""

import random
import time
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidOrder, InvalidTransition
from storefront.order.events import (
    AdminNotesUpdated,
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
)

DEFAULT_PAYMENT_METHOD = "Cash on Delivery"
DELIVERY_ESTIMATE_DAYS = 6


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


STATUS_DISPLAY = {
    OrderStatus.PENDING: "Pending Confirmation",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Stock consumed by an order in these states has not left the warehouse
_RESTOCKABLE_STATES = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
}

_REQUIRED_CUSTOMER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "zip_code",
)


def generate_order_number():
    """``ORD`` + epoch milliseconds + three random digits."""
    return f"ORD{int(time.time() * 1000)}{random.randint(0, 999):03d}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerDetails:
    """Who the order is for and where it goes, as entered at checkout.

    Captured once on the order; later profile changes do not touch it.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    email = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(max_length=100, default="USA")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(max_length=100)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    customer_id = Identifier(required=True)
    customer_details = ValueObject(CustomerDetails)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    shipping_method = String(max_length=20)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    discount_code = String(max_length=50)
    total = Float(required=True, min_value=0.0)
    payment_method = String(max_length=50, default=DEFAULT_PAYMENT_METHOD)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    admin_notes = Text(default="")
    customer_notes = Text(default="")
    estimated_delivery = DateTime()
    actual_delivery = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        customer_details,
        cart,
        order_number,
        payment_method=None,
        customer_notes=None,
    ):
        """Snapshot ``cart`` into a new pending order.

        Args:
            customer_details: Dict with first_name, last_name, email, phone,
                address, city, state, zip_code and optionally country.
            cart: The customer's ShoppingCart, read but not modified.

        Raises:
            InvalidOrder: If details are incomplete, the cart is empty, or its
                totals are not positive.
        """
        errors = {}
        if not customer_details:
            errors["customer_details"] = ["Customer details are required"]
        elif not isinstance(customer_details, dict):
            errors["customer_details"] = ["Customer details must be an object of named fields"]
        else:
            missing = [name for name in _REQUIRED_CUSTOMER_FIELDS if not customer_details.get(name)]
            if missing:
                errors["customer_details"] = [f"Missing customer details: {', '.join(missing)}"]
        if not cart.items:
            errors["items"] = ["Cannot place an order from an empty cart"]
        elif not (cart.subtotal or 0) > 0 or not (cart.total or 0) > 0:
            errors["total"] = ["Order subtotal and total must be positive"]
        if errors:
            raise InvalidOrder(errors)

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            customer_details=CustomerDetails(
                **{name: customer_details[name] for name in _REQUIRED_CUSTOMER_FIELDS},
                country=customer_details.get("country") or "USA",
            ),
            subtotal=cart.subtotal,
            shipping_cost=cart.shipping.cost if cart.shipping else 0.0,
            shipping_method=cart.shipping.method if cart.shipping else None,
            tax=cart.tax,
            discount=cart.discount.amount if cart.discount else 0.0,
            discount_code=cart.discount.code if cart.discount else None,
            total=cart.total,
            payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
            status=OrderStatus.PENDING.value,
            admin_notes="",
            customer_notes=customer_notes or "",
            created_at=now,
            updated_at=now,
        )
        for line in cart.items:
            order.add_items(
                OrderItem(
                    product_id=str(line.product_id),
                    product_name=line.product_name,
                    size=line.size,
                    color=line.color,
                    quantity=line.quantity,
                    price=line.price,
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=order.total_items,
                total=order.total,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived figures
    # -------------------------------------------------------------------
    @property
    def total_items(self):
        return sum(item.quantity for item in self.items or [])

    @property
    def status_display(self):
        return STATUS_DISPLAY[OrderStatus(self.status)]

    @property
    def restockable(self):
        """True while the order's stock has not shipped."""
        return OrderStatus(self.status) in _RESTOCKABLE_STATES

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def change_status(self, status, admin_notes=None):
        """Move the order to ``status``.

        Only the next forward step or a cancellation is accepted. Returns the
        previous status so callers can act on what the order left behind.
        """
        try:
            target = OrderStatus(status)
        except ValueError:
            valid = ", ".join(s.value for s in OrderStatus)
            raise InvalidTransition({"status": [f"Unknown order status '{status}'. Choose one of: {valid}"]})

        self._assert_can_transition(target)

        previous = OrderStatus(self.status)
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        if target == OrderStatus.SHIPPED:
            self.estimated_delivery = now + timedelta(days=DELIVERY_ESTIMATE_DAYS)
        elif target == OrderStatus.DELIVERED:
            self.actual_delivery = now

        if admin_notes is not None:
            self.admin_notes = admin_notes

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        if target == OrderStatus.CANCELLED:
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    previous_status=previous.value,
                    restocked=previous in _RESTOCKABLE_STATES,
                    cancelled_at=now,
                )
            )
        return previous

    def update_admin_notes(self, admin_notes):
        self.admin_notes = admin_notes or ""
        self.updated_at = datetime.now(UTC)

        self.raise_(AdminNotesUpdated(order_id=str(self.id), admin_notes=self.admin_notes))
