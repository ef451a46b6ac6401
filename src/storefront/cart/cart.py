"""Shopping Cart aggregate (CQRS) — one live cart per customer.

Lines are keyed by (product, size, color) and carry a price snapshot taken
when the product was first added. Every derived total is recomputed from the
lines after each mutation through :mod:`storefront.cart.pricing`, so the cart
is never observed with totals that disagree with its items.

Carts idle for longer than ``CART_TTL_DAYS`` are swept by the expiry job;
an expired cart is emptied and deactivated, and comes back to life the next
time its customer touches it.
"""

from datetime import UTC, datetime, timedelta

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.cart.events import (
    CartCleared,
    CartDiscountApplied,
    CartDiscountRemoved,
    CartExpired,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartShippingMethodChanged,
)
from storefront.cart.pricing import (
    CART_TTL_DAYS,
    SHIPPING_METHODS,
    ShippingMethod,
    calculate_totals,
    is_free_shipping_eligible,
    money,
)
from storefront.domain import storefront
from storefront.errors import ItemNotFound


def _as_utc(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="ShoppingCart")
class ShippingSelection:
    method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    cost = Float(default=0.0, min_value=0.0)
    estimated_days = Integer(default=5, min_value=1)


@storefront.value_object(part_of="ShoppingCart")
class DiscountInfo:
    """A discount code on the cart.

    ``fixed_amount`` and ``percentage`` are what the code grants; ``amount``
    is what it is currently worth against the cart, after clamping.
    """

    code = String(required=True, max_length=50)
    fixed_amount = Float(default=0.0, min_value=0.0)
    percentage = Float(default=0.0, min_value=0.0, max_value=100.0)
    amount = Float(default=0.0, min_value=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    product_name = String(max_length=100)
    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self):
        return money(self.price * self.quantity)

    def matches(self, product_id, size, color):
        return str(self.product_id) == str(product_id) and self.size == size and self.color == color


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = ValueObject(ShippingSelection)
    discount = ValueObject(DiscountInfo)
    total = Float(default=0.0)
    expires_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        _, days = SHIPPING_METHODS[ShippingMethod.STANDARD]
        return cls(
            customer_id=customer_id,
            shipping=ShippingSelection(
                method=ShippingMethod.STANDARD.value,
                cost=0.0,
                estimated_days=days,
            ),
            subtotal=0.0,
            tax=0.0,
            total=0.0,
            is_active=True,
            expires_at=now + timedelta(days=CART_TTL_DAYS),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived figures
    # -------------------------------------------------------------------
    @property
    def total_items(self):
        return sum(item.quantity for item in self.items or [])

    @property
    def is_empty(self):
        return not self.items

    @property
    def savings(self):
        """Original-price value of the lines less the subtotal, never negative.

        Lines without an original price count at their current price.
        """
        at_original = sum((item.original_price or item.price) * item.quantity for item in self.items or [])
        return money(max(0.0, at_original - (self.subtotal or 0.0)))

    @property
    def eligible_for_free_shipping(self):
        return is_free_shipping_eligible(self.subtotal or 0.0)

    def is_expired(self, as_of=None):
        as_of = as_of or datetime.now(UTC)
        return self.expires_at is not None and _as_utc(self.expires_at) < as_of

    def summary(self):
        return {
            "item_count": len(self.items or []),
            "total_items": self.total_items,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping.cost if self.shipping else 0.0,
            "discount": self.discount.amount if self.discount else 0.0,
            "total": self.total,
            "savings": self.savings,
            "eligible_for_free_shipping": self.eligible_for_free_shipping,
        }

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_line(self, product_id, size, color):
        return next((i for i in self.items or [] if i.matches(product_id, size, color)), None)

    def line_for(self, product_id, size, color):
        """Return the line for a product variant, or raise ItemNotFound."""
        line = self.find_line(product_id, size, color)
        if line is None:
            raise ItemNotFound({"item": [f"No cart line for product {product_id} in size {size} / color {color}"]})
        return line

    def line_by_id(self, item_id):
        line = next((i for i in self.items or [] if str(i.id) == str(item_id)), None)
        if line is None:
            raise ItemNotFound({"item_id": ["Item not found in cart"]})
        return line

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, size, color, quantity):
        """Add ``quantity`` of a product variant, merging into an existing line.

        The line's price snapshot is taken from ``product`` the first time the
        variant enters the cart and is not refreshed when the line grows.
        """
        self._ensure_active()
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        line = self.find_line(product.id, size, color)
        if line:
            line.quantity += quantity
        else:
            line = CartItem(
                product_id=str(product.id),
                product_name=product.name,
                size=size,
                color=color,
                quantity=quantity,
                price=product.price,
                original_price=product.original_price,
                added_at=now,
            )
            self.add_items(line)

        self._recalculate_totals(now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(line.id),
                product_id=str(product.id),
                size=size,
                color=color,
                quantity=quantity,
                line_quantity=line.quantity,
                price=line.price,
            )
        )
        return line

    def update_item_quantity(self, product_id, size, color, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        line = self.line_for(product_id, size, color)
        return self.update_item_quantity_by_id(line.id, quantity)

    def update_item_quantity_by_id(self, item_id, quantity):
        self._ensure_active()
        line = self.line_by_id(item_id)

        if quantity <= 0:
            return self.remove_item_by_id(item_id)

        previous_quantity = line.quantity
        now = datetime.now(UTC)
        line.quantity = quantity
        self._recalculate_totals(now)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(line.id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return line

    def remove_item(self, product_id, size, color):
        line = self.line_for(product_id, size, color)
        return self.remove_item_by_id(line.id)

    def remove_item_by_id(self, item_id):
        self._ensure_active()
        line = self.line_by_id(item_id)

        self.remove_items(line)
        self._recalculate_totals(datetime.now(UTC))

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                product_id=str(line.product_id),
                quantity=line.quantity,
            )
        )
        return line

    def clear(self):
        """Empty the cart and drop any discount. Clearing an empty cart is a no-op."""
        removed = list(self.items or [])
        for line in removed:
            self.remove_items(line)
        self.discount = None
        self._recalculate_totals(datetime.now(UTC))

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=len(removed)))
        return removed

    # -------------------------------------------------------------------
    # Discounts and shipping
    # -------------------------------------------------------------------
    def apply_discount(self, code, amount=None, percentage=None):
        """Attach a discount code. A fixed amount takes precedence over a percentage."""
        self._ensure_active()

        errors = {}
        if not code:
            errors["code"] = ["Discount code is required"]
        if amount is not None and amount < 0:
            errors["amount"] = ["Discount amount cannot be negative"]
        if percentage is not None and not 0 <= percentage <= 100:
            errors["percentage"] = ["Discount percentage must be between 0 and 100"]
        if not errors and not amount and not percentage:
            errors["discount"] = ["Either an amount or a percentage is required"]
        if errors:
            raise ValidationError(errors)

        self.discount = DiscountInfo(
            code=code,
            fixed_amount=amount or 0.0,
            percentage=percentage or 0.0,
            amount=0.0,
        )
        self._recalculate_totals(datetime.now(UTC))

        self.raise_(
            CartDiscountApplied(
                cart_id=str(self.id),
                code=code,
                amount=self.discount.amount,
                percentage=percentage,
            )
        )

    def remove_discount(self):
        code = self.discount.code if self.discount else None
        self.discount = None
        self._recalculate_totals(datetime.now(UTC))

        self.raise_(CartDiscountRemoved(cart_id=str(self.id), code=code))

    def update_shipping_method(self, method):
        """Select a shipping method. ``free`` falls back to standard below the threshold."""
        self._ensure_active()
        try:
            selected = ShippingMethod(method)
        except ValueError:
            valid = ", ".join(m.value for m in ShippingMethod)
            raise ValidationError({"method": [f"Unknown shipping method '{method}'. Choose one of: {valid}"]})

        _, days = SHIPPING_METHODS[selected]
        self.shipping = ShippingSelection(method=selected.value, cost=0.0, estimated_days=days)
        self._recalculate_totals(datetime.now(UTC))

        self.raise_(
            CartShippingMethodChanged(
                cart_id=str(self.id),
                method=self.shipping.method,
                cost=self.shipping.cost,
                estimated_days=self.shipping.estimated_days,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def deactivate(self, as_of=None):
        """Empty and deactivate an idle cart. Stock is released by the caller."""
        as_of = as_of or datetime.now(UTC)
        for line in list(self.items or []):
            self.remove_items(line)
        self.discount = None
        self._recalculate_totals(as_of, touch=False)
        self.is_active = False
        self.updated_at = as_of

        self.raise_(
            CartExpired(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                expired_at=as_of,
            )
        )

    def reactivate(self):
        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.expires_at = now + timedelta(days=CART_TTL_DAYS)

    def _ensure_active(self):
        if not self.is_active:
            raise ValidationError({"cart": ["Cart is no longer active"]})

    def _recalculate_totals(self, now, touch=True):
        """Bring every derived figure in line with the current items."""
        method = self.shipping.method if self.shipping else ShippingMethod.STANDARD.value
        totals = calculate_totals(
            [(item.price, item.quantity) for item in self.items or []],
            shipping_method=method,
            discount_fixed=self.discount.fixed_amount if self.discount else None,
            discount_percentage=self.discount.percentage if self.discount else None,
        )

        with atomic_change(self):
            self.subtotal = totals.subtotal
            self.tax = totals.tax
            self.shipping = ShippingSelection(
                method=totals.shipping.method,
                cost=totals.shipping.cost,
                estimated_days=totals.shipping.estimated_days,
            )
            if self.discount:
                self.discount = DiscountInfo(
                    code=self.discount.code,
                    fixed_amount=self.discount.fixed_amount,
                    percentage=self.discount.percentage,
                    amount=totals.discount,
                )
            self.total = totals.total
            if touch:
                self.updated_at = now
                self.expires_at = now + timedelta(days=CART_TTL_DAYS)
