"""Product aggregate with its inventory ledger.

Each product owns one InventoryRecord per (size, color). A record splits its
on-hand stock into what is reserved for shopping carts and what is still
sellable:

    quantity:  physical count
    reserved:  held for carts (not yet ordered)
    available: quantity - reserved

Stock moves through the ledger in three steps: reserved when a line enters a
cart, released when the line leaves it (or the cart expires), and committed
(consumed) when the cart becomes an order.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.catalogue.events import (
    InventoryLevelSet,
    ProductCreated,
    ProductDeactivated,
    ProductPriceChanged,
    StockCommitted,
    StockReleased,
    StockReserved,
    StockRestocked,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStock, OutOfStock


@storefront.entity(part_of="Product")
class InventoryRecord:
    """Stock for one size/color combination of a product."""

    size = String(required=True, max_length=20)
    color = String(required=True, max_length=50)
    quantity = Integer(default=0, min_value=0)
    reserved = Integer(default=0, min_value=0)

    @invariant.post
    def reserved_cannot_exceed_quantity(self):
        if (self.reserved or 0) > (self.quantity or 0):
            raise ValidationError(
                {"reserved": [f"Reserved ({self.reserved}) cannot exceed quantity ({self.quantity})"]}
            )

    @property
    def available(self):
        return (self.quantity or 0) - (self.reserved or 0)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=100)
    description = Text()
    category = String(required=True, max_length=50)
    brand = String(max_length=50, default="StyleHub")
    price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)
    inventory = HasMany(InventoryRecord)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def original_price_cannot_be_below_price(self):
        if self.original_price and self.original_price < self.price:
            raise ValidationError({"original_price": ["Original price must be greater than or equal to current price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, category, price, inventory=None, description=None, original_price=None, brand=None):
        """Author a product with its size/color stock matrix.

        Args:
            inventory: List of dicts with size, color and quantity.
        """
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            category=category,
            brand=brand or "StyleHub",
            price=price,
            original_price=original_price,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        seen = set()
        for entry in inventory or []:
            key = (entry["size"], entry["color"])
            if key in seen:
                raise ValidationError({"inventory": [f"Duplicate inventory entry for size {key[0]} / color {key[1]}"]})
            seen.add(key)
            product.add_inventory(
                InventoryRecord(
                    size=entry["size"],
                    color=entry["color"],
                    quantity=entry.get("quantity", 0),
                    reserved=0,
                )
            )

        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=name,
                category=category,
                price=price,
                total_stock=product.total_stock,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived stock figures
    # -------------------------------------------------------------------
    @property
    def total_stock(self):
        return sum(record.quantity or 0 for record in self.inventory or [])

    @property
    def available_stock(self):
        return sum(record.available for record in self.inventory or [])

    @property
    def in_stock(self):
        return any(record.available > 0 for record in self.inventory or [])

    def record_for(self, size, color):
        """Return the inventory record for an exact size/color, or None."""
        return next(
            (r for r in self.inventory or [] if r.size == size and r.color == color),
            None,
        )

    def is_available(self, size, color):
        record = self.record_for(size, color)
        return record is not None and record.quantity > record.reserved

    def available_for(self, size, color):
        record = self.record_for(size, color)
        return record.available if record else 0

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve_stock(self, size, color, quantity):
        """Hold ``quantity`` units of a size/color for a cart."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        record = self.record_for(size, color)
        if record is None:
            raise OutOfStock({"inventory": [f"{self.name} is not offered in size {size} / color {color}"]})

        if record.available < quantity:
            raise InsufficientStock(
                {"quantity": [f"Insufficient stock: {record.available} available, {quantity} requested"]}
            )

        record.reserved += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                size=size,
                color=color,
                quantity=quantity,
                new_reserved=record.reserved,
                new_available=record.available,
            )
        )

    def release_stock(self, size, color, quantity):
        """Return held stock. Over-release is clamped at zero."""
        record = self.record_for(size, color)
        if record is None or quantity <= 0:
            return

        released = min(quantity, record.reserved)
        record.reserved = record.reserved - released
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReleased(
                product_id=str(self.id),
                size=size,
                color=color,
                quantity=released,
                new_reserved=record.reserved,
                new_available=record.available,
            )
        )

    def commit_stock(self, size, color, quantity):
        """Consume reserved stock for a placed order. Reduces on-hand."""
        record = self.record_for(size, color)
        if record is None:
            raise OutOfStock({"inventory": [f"{self.name} is not offered in size {size} / color {color}"]})
        if quantity > record.reserved:
            raise InsufficientStock(
                {"quantity": [f"Cannot commit {quantity} units, only {record.reserved} reserved"]}
            )

        # Lower reserved first so reserved <= quantity holds at every step
        record.reserved = record.reserved - quantity
        record.quantity = record.quantity - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockCommitted(
                product_id=str(self.id),
                size=size,
                color=color,
                quantity=quantity,
                new_quantity=record.quantity,
                new_reserved=record.reserved,
            )
        )

    def restock(self, size, color, quantity):
        """Put back stock consumed by an order that was cancelled before shipping."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        record = self.record_for(size, color)
        if record is None:
            record = InventoryRecord(size=size, color=color, quantity=0, reserved=0)
            self.add_inventory(record)

        record.quantity = (record.quantity or 0) + quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestocked(
                product_id=str(self.id),
                size=size,
                color=color,
                quantity=quantity,
                new_quantity=record.quantity,
            )
        )

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def set_stock(self, size, color, quantity):
        """Set the on-hand quantity for a size/color, creating the record if needed."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        record = self.record_for(size, color)
        previous = record.quantity if record else 0
        reserved = record.reserved if record else 0

        if quantity < reserved:
            raise ValidationError(
                {"quantity": [f"Quantity cannot drop below the {reserved} units currently reserved"]}
            )

        if record is None:
            self.add_inventory(InventoryRecord(size=size, color=color, quantity=quantity, reserved=0))
        else:
            record.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            InventoryLevelSet(
                product_id=str(self.id),
                size=size,
                color=color,
                previous_quantity=previous,
                new_quantity=quantity,
                reserved=reserved,
            )
        )

    def change_price(self, price, original_price=None):
        """Change the catalogue price. Cart lines and orders keep their snapshot."""
        previous = self.price
        now = datetime.now(UTC)

        with atomic_change(self):
            self.price = price
            self.original_price = original_price
            self.updated_at = now

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=price,
                original_price=original_price,
                changed_at=now,
            )
        )

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now

        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))
