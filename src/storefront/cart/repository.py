"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart, _as_utc
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_customer(self, customer_id) -> ShoppingCart | None:
        """The customer's cart, active or not, or None if they never had one."""
        found = self._dao.query.filter(customer_id=str(customer_id)).all()
        if not found.items:
            return None
        return self.get(found.first.id)

    def expired(self, as_of) -> list[ShoppingCart]:
        """Active carts whose expiry date is before ``as_of``."""
        active = self._dao.query.filter(is_active=True).limit(None).all().items
        return [
            self.get(cart.id)
            for cart in active
            if cart.expires_at is not None and _as_utc(cart.expires_at) < as_of
        ]
