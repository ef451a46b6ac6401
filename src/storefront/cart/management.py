"""Cart management — commands, handler and the expiry sweep.

Handles lazy cart creation, clearing, and expiry. Carts are addressed by
customer: each customer owns at most one cart, created on first access and
reactivated if it expired in the meantime.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ValidationError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


def cart_for(customer_id):
    """Load the customer's cart, creating or reactivating it as needed.

    Returns ``(cart, changed)``; ``changed`` is True when the cart still has
    to be written for the creation or reactivation to stick.
    """
    cart = current_domain.repository_for(ShoppingCart).for_customer(customer_id)
    if cart is None:
        logger.info("Creating cart", customer_id=str(customer_id))
        return ShoppingCart.create(customer_id=customer_id), True
    if not cart.is_active:
        logger.info("Reactivating expired cart", cart_id=str(cart.id), customer_id=str(customer_id))
        cart.reactivate()
        return cart, True
    return cart, False


def products_for(lines):
    """Load each distinct product referenced by ``lines`` once, keyed by id."""
    repo = current_domain.repository_for(Product)
    products = {}
    for line in lines:
        key = str(line.product_id)
        if key not in products:
            products[key] = repo.get(key)
    return products


def save_products(products):
    repo = current_domain.repository_for(Product)
    for product in products.values():
        repo.add(product)


@storefront.command(part_of="ShoppingCart")
class GetOrCreateCart:
    customer_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    """Empty the cart and hand every reservation back to the ledger."""

    customer_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ExpireCart:
    cart_id = Identifier(required=True)
    as_of = DateTime()


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(GetOrCreateCart)
    def get_or_create_cart(self, command):
        cart, changed = cart_for(command.customer_id)
        if changed:
            current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart, _ = cart_for(command.customer_id)
        products = products_for(cart.items or [])

        for line in cart.items or []:
            products[str(line.product_id)].release_stock(line.size, line.color, line.quantity)
        cart.clear()

        save_products(products)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(ExpireCart)
    def expire_cart(self, command):
        """Expire one cart. Returns False when it is no longer due."""
        as_of = _utc(command.as_of)
        cart = current_domain.repository_for(ShoppingCart).get(command.cart_id)
        # The cart may have been used again since the sweep selected it
        if not cart.is_active or not cart.is_expired(as_of):
            return False

        products = products_for(cart.items or [])
        for line in cart.items or []:
            products[str(line.product_id)].release_stock(line.size, line.color, line.quantity)
        cart.deactivate(as_of=as_of)

        save_products(products)
        current_domain.repository_for(ShoppingCart).add(cart)
        return True


def _utc(value):
    value = value or datetime.now(UTC)
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def expire_carts(as_of=None):
    """Sweep active carts past their expiry date and return how many expired.

    Meant to be triggered periodically by an external scheduler, through the
    maintenance endpoint or ``manage.py expire-carts``. Every cart goes
    through its own ``ExpireCart`` command and so commits on its own: a cart
    that fails, or keeps conflicting after the handler's version retries, is
    logged and left for the next sweep without holding back the others.
    Call it outside any unit of work, or all carts would share one.
    """
    as_of = _utc(as_of)

    expired = current_domain.repository_for(ShoppingCart).expired(as_of)
    if not expired:
        logger.info("No expired carts found", as_of=as_of.isoformat())
        return 0

    expired_count = 0
    for cart in expired:
        try:
            done = current_domain.process(
                ExpireCart(cart_id=str(cart.id), as_of=as_of),
                asynchronous=False,
            )
        except (ValidationError, ExpectedVersionError) as exc:
            logger.warning(
                "Failed to expire cart",
                cart_id=str(cart.id),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            continue

        if done:
            expired_count += 1
            logger.info(
                "Expired cart",
                cart_id=str(cart.id),
                customer_id=str(cart.customer_id),
                item_count=len(cart.items or []),
            )

    logger.info("Cart expiry sweep complete", expired_count=expired_count)
    return expired_count
