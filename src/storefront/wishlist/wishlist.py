"""Wishlist aggregate — products a customer saved for later.

One wishlist per customer, created on first use. Unlike cart lines, wishlist
entries hold no stock and carry no price snapshot.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier

from storefront.domain import storefront
from storefront.errors import ItemNotFound
from storefront.wishlist.events import ProductUnwishlisted, ProductWishlisted, WishlistCleared


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    added_at = DateTime()


@storefront.aggregate
class Wishlist:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(WishlistItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    @property
    def item_count(self):
        return len(self.items or [])

    def contains(self, product_id):
        return any(str(i.product_id) == str(product_id) for i in self.items or [])

    def add_product(self, product_id):
        if self.contains(product_id):
            raise ValidationError({"product_id": ["Product is already in the wishlist"]})

        now = datetime.now(UTC)
        self.add_items(WishlistItem(product_id=str(product_id), added_at=now))
        self.updated_at = now

        self.raise_(
            ProductWishlisted(
                wishlist_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
            )
        )

    def remove_product(self, product_id):
        item = next((i for i in self.items or [] if str(i.product_id) == str(product_id)), None)
        if item is None:
            raise ItemNotFound({"product_id": ["Product is not in the wishlist"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(ProductUnwishlisted(wishlist_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        removed = list(self.items or [])
        for item in removed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(WishlistCleared(wishlist_id=str(self.id), items_removed=len(removed)))
