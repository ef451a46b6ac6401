"""Repository for the Order aggregate, with the order listing queries."""

from datetime import UTC, datetime

from storefront.domain import storefront
from storefront.order.order import Order

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _newest_first(orders):
    def placed_at(order):
        if order.created_at is None:
            return _EPOCH
        if order.created_at.tzinfo is None:
            return order.created_at.replace(tzinfo=UTC)
        return order.created_at

    return sorted(orders, key=placed_at, reverse=True)


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """A customer's orders, newest first."""
        found = self._dao.query.filter(customer_id=str(customer_id)).limit(None).all().items
        return _newest_first(self.get(order.id) for order in found)

    def listing(self, status=None) -> list[Order]:
        """Every order, newest first, optionally narrowed to one status."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return _newest_first(self.get(order.id) for order in query.limit(None).all().items)

    def by_order_number(self, order_number) -> Order | None:
        found = self._dao.query.filter(order_number=order_number).all()
        if not found.items:
            return None
        return self.get(found.first.id)
