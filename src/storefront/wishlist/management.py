"""Wishlist management — commands, handler and repository."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.repository(part_of=Wishlist)
class WishlistRepository:
    def for_customer(self, customer_id) -> Wishlist | None:
        found = self._dao.query.filter(customer_id=str(customer_id)).all()
        if not found.items:
            return None
        return self.get(found.first.id)


def wishlist_for(customer_id):
    wishlist = current_domain.repository_for(Wishlist).for_customer(customer_id)
    return wishlist or Wishlist.create(customer_id=customer_id)


@storefront.command(part_of="Wishlist")
class AddToWishlist:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class RemoveFromWishlist:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class ClearWishlist:
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Wishlist)
class ManageWishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        # Raises ObjectNotFoundError for unknown products
        current_domain.repository_for(Product).get(command.product_id)

        wishlist = wishlist_for(command.customer_id)
        wishlist.add_product(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        wishlist = wishlist_for(command.customer_id)
        wishlist.remove_product(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)

    @handle(ClearWishlist)
    def clear_wishlist(self, command):
        wishlist = wishlist_for(command.customer_id)
        wishlist.clear()
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)
