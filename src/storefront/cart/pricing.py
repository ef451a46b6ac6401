"""Cart pricing — pure functions deriving cart totals from line items.

    subtotal = Σ price × quantity
    tax      = subtotal × TAX_RATE
    shipping = 0 at or above FREE_SHIPPING_THRESHOLD, else the method's flat fee
    total    = subtotal + tax + shipping − discount

All amounts are rounded to cents. Nothing here touches the domain or storage,
so the same rules price carts, summaries and order snapshots.
"""

from dataclasses import dataclass
from enum import Enum

TAX_RATE = 0.08
FREE_SHIPPING_THRESHOLD = 100.0
CART_TTL_DAYS = 30


class ShippingMethod(Enum):
    FREE = "free"
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


# method -> (flat fee below the threshold, estimated days)
SHIPPING_METHODS = {
    ShippingMethod.FREE: (0.0, 5),
    ShippingMethod.STANDARD: (10.0, 5),
    ShippingMethod.EXPRESS: (25.0, 2),
    ShippingMethod.OVERNIGHT: (50.0, 1),
}


@dataclass(frozen=True)
class ShippingQuote:
    method: str
    cost: float
    estimated_days: int


@dataclass(frozen=True)
class CartTotals:
    subtotal: float
    tax: float
    shipping: ShippingQuote
    discount: float
    total: float


def money(value: float) -> float:
    """Round to cents."""
    return round(value, 2)


def is_free_shipping_eligible(subtotal: float) -> bool:
    return subtotal >= FREE_SHIPPING_THRESHOLD


def shipping_for(method: str, subtotal: float) -> ShippingQuote:
    """Quote shipping for ``method`` at the given subtotal.

    ``free`` is only honoured once the subtotal reaches the threshold;
    below it the cart falls back to standard shipping.
    """
    selected = ShippingMethod(method)
    eligible = is_free_shipping_eligible(subtotal)

    if selected is ShippingMethod.FREE and not eligible:
        selected = ShippingMethod.STANDARD

    fee, days = SHIPPING_METHODS[selected]
    return ShippingQuote(
        method=selected.value,
        cost=0.0 if eligible else fee,
        estimated_days=days,
    )


def discount_amount(subtotal: float, ceiling: float, amount: float | None = None, percentage: float | None = None) -> float:
    """Resolve a discount to a money amount, never exceeding ``ceiling``.

    A fixed ``amount`` wins over ``percentage``; a percentage is applied to
    the subtotal.
    """
    if amount:
        resolved = amount
    elif percentage:
        resolved = subtotal * percentage / 100
    else:
        resolved = 0.0
    return money(min(max(resolved, 0.0), ceiling))


def calculate_totals(
    lines,
    shipping_method: str = ShippingMethod.STANDARD.value,
    discount_fixed: float | None = None,
    discount_percentage: float | None = None,
) -> CartTotals:
    """Derive every cart total from ``lines`` as one unit.

    Args:
        lines: Iterable of ``(price, quantity)`` pairs.
        shipping_method: Selected shipping method value.
        discount_fixed: Fixed discount amount, if any.
        discount_percentage: Percentage discount (0–100), if any.
    """
    subtotal = money(sum(price * quantity for price, quantity in lines))
    tax = money(subtotal * TAX_RATE)
    if subtotal > 0:
        shipping = shipping_for(shipping_method, subtotal)
    else:
        # Nothing to ship
        _, days = SHIPPING_METHODS[ShippingMethod(shipping_method)]
        shipping = ShippingQuote(method=shipping_method, cost=0.0, estimated_days=days)
    ceiling = money(subtotal + tax + shipping.cost)
    discount = discount_amount(subtotal, ceiling, discount_fixed, discount_percentage)

    return CartTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=money(ceiling - discount),
    )
