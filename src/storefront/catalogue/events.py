"""Domain events for the Product aggregate and its inventory ledger."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A product was authored with its size/color inventory matrix."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    price = Float(required=True)
    total_stock = Integer(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    original_price = Float()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class InventoryLevelSet:
    """An administrator set the on-hand quantity for a size/color."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reserved = Integer(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Stock was provisionally held for a cart."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    new_reserved = Integer(required=True)
    new_available = Integer(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """A provisional hold was returned to available stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    new_reserved = Integer(required=True)
    new_available = Integer(required=True)


@storefront.event(part_of="Product")
class StockCommitted:
    """Reserved stock was consumed by a placed order."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    new_reserved = Integer(required=True)


@storefront.event(part_of="Product")
class StockRestocked:
    """Stock consumed by a cancelled order was put back on the shelf."""

    __version__ = 1

    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
