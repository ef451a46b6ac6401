"""Repository for the Product aggregate, with the storefront catalogue listing."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from storefront.catalogue.product import Product
from storefront.domain import storefront

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100

SORTABLE_FIELDS = ("created_at", "price", "name")

_EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class ProductPage:
    products: list[Product]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def _sort_key(sort_by):
    if sort_by == "name":
        return lambda product: (product.name or "").lower()
    if sort_by == "price":
        return lambda product: product.price or 0.0

    def created(product):
        if product.created_at is None:
            return _EPOCH
        if product.created_at.tzinfo is None:
            return product.created_at.replace(tzinfo=UTC)
        return product.created_at

    return created


def _matches_text(product, search):
    needle = search.lower()
    return needle in (product.name or "").lower() or needle in (product.description or "").lower()


def _offers_any(product, sizes=None, colors=None):
    """True if some inventory record has one of ``sizes`` and one of ``colors``."""
    for record in product.inventory or []:
        if sizes and record.size not in sizes:
            continue
        if colors and record.color not in colors:
            continue
        return True
    return False


@storefront.repository(part_of=Product)
class ProductRepository:
    def listing(
        self,
        category=None,
        search=None,
        min_price=None,
        max_price=None,
        sizes=None,
        colors=None,
        on_sale=False,
        sort_by="created_at",
        sort_order="desc",
        page=1,
        limit=DEFAULT_PAGE_SIZE,
    ) -> ProductPage:
        """One page of active products matching every given filter.

        ``sizes`` and ``colors`` keep products with an inventory record in one
        of the listed sizes and one of the listed colors; ``on_sale`` keeps
        products priced below their original price.
        """
        query = self._dao.query.filter(is_active=True)
        if category:
            query = query.filter(category__iexact=category)
        if min_price is not None:
            query = query.filter(price__gte=min_price)
        if max_price is not None:
            query = query.filter(price__lte=max_price)

        products = [self.get(found.id) for found in query.limit(None).all().items]
        if search:
            products = [p for p in products if _matches_text(p, search)]
        if sizes or colors:
            products = [p for p in products if _offers_any(p, sizes, colors)]
        if on_sale:
            products = [p for p in products if p.original_price and p.original_price > p.price]

        products.sort(key=_sort_key(sort_by), reverse=sort_order == "desc")

        start = (page - 1) * limit
        return ProductPage(products=products[start : start + limit], page=page, limit=limit, total=len(products))
