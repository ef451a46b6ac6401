"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product variant was added to the cart (or its line grew)."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(required=True)
    color = String(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartDiscountApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True)
    amount = Float(required=True)
    percentage = Float()


@storefront.event(part_of="ShoppingCart")
class CartDiscountRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String()


@storefront.event(part_of="ShoppingCart")
class CartShippingMethodChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    method = String(required=True)
    cost = Float(required=True)
    estimated_days = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartExpired:
    """An idle cart passed its expiry date and was deactivated."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    expired_at = DateTime(required=True)
