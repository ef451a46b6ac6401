"""FastAPI routes for the Storefront — products, cart, orders and wishlist.

Every mutation goes through a Protean command processed synchronously; reads
load aggregates from their repositories and render them through the pydantic
schemas.
"""

import json
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from protean.utils.globals import current_domain

from storefront.api.access import current_customer, current_role, is_admin, require_admin
from storefront.api.schemas import (
    AddToCartRequest,
    AddToWishlistRequest,
    AdminNotesRequest,
    ApplyDiscountRequest,
    AvailabilityResponse,
    CartCountResponse,
    CartResponse,
    CartSummaryResponse,
    ChangePriceRequest,
    CreateProductRequest,
    ExpireCartsRequest,
    ExpireCartsResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    SetInventoryRequest,
    ShippingMethodRequest,
    StatusResponse,
    UpdateCartItemQuantityRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    WishlistCheckResponse,
    WishlistResponse,
)
from storefront.cart.adjustments import ApplyCartDiscount, ChangeShippingMethod, RemoveCartDiscount
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import (
    AddToCart,
    RemoveCartItemById,
    RemoveFromCart,
    UpdateCartItem,
    UpdateCartItemById,
)
from storefront.cart.management import ClearCart, GetOrCreateCart, expire_carts
from storefront.catalogue.management import ChangeProductPrice, CreateProduct, DeactivateProduct
from storefront.catalogue.repository import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from storefront.catalogue.product import Product
from storefront.catalogue.stock import SetInventoryLevel
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.order.status import AddAdminNotes, UpdateOrderStatus
from storefront.wishlist.management import AddToWishlist, ClearWishlist, RemoveFromWishlist
from storefront.wishlist.wishlist import Wishlist

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


def _cart_response(cart_id) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return CartResponse.from_cart(cart)


def _load_cart(customer_id):
    cart_id = current_domain.process(GetOrCreateCart(customer_id=customer_id), asynchronous=False)
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def _split(value: str | None) -> list[str] | None:
    """Comma-separated query value as a list, None when absent or blank."""
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()] or None


# --- Product endpoints ---


@product_router.get("", response_model=ProductListResponse)
async def list_products(
    category: str | None = None,
    search: str | None = None,
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    sizes: str | None = Query(default=None, description="Comma-separated sizes, e.g. M,L"),
    colors: str | None = Query(default=None, description="Comma-separated colors"),
    on_sale: bool = False,
    sort_by: Literal["created_at", "price", "name"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ProductListResponse:
    """Browse the active catalogue."""
    listing = current_domain.repository_for(Product).listing(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sizes=_split(sizes),
        colors=_split(colors),
        on_sale=on_sale,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return ProductListResponse.from_page(listing)


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, _: str = Depends(require_admin)) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        category=body.category,
        brand=body.brand,
        price=body.price,
        original_price=body.original_price,
        inventory=json.dumps([entry.model_dump() for entry in body.inventory]),
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse.from_product(product)


@product_router.get("/{product_id}/availability", response_model=AvailabilityResponse)
async def get_availability(product_id: str, size: str = Query(...), color: str = Query(...)) -> AvailabilityResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return AvailabilityResponse(
        product_id=str(product.id),
        size=size,
        color=color,
        available=product.available_for(size, color),
        is_available=product.is_active and product.is_available(size, color),
    )


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_price(product_id: str, body: ChangePriceRequest, _: str = Depends(require_admin)) -> StatusResponse:
    command = ChangeProductPrice(
        product_id=product_id,
        price=body.price,
        original_price=body.original_price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/inventory", response_model=StatusResponse)
async def set_inventory(product_id: str, body: SetInventoryRequest, _: str = Depends(require_admin)) -> StatusResponse:
    command = SetInventoryLevel(
        product_id=product_id,
        size=body.size,
        color=body.color,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, _: str = Depends(require_admin)) -> StatusResponse:
    """Withdraw a product from sale. Carts and orders still reference it, so it is deactivated, not removed."""
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# --- Cart endpoints ---


@cart_router.get("", response_model=CartResponse)
async def get_cart(customer_id: str = Depends(current_customer)) -> CartResponse:
    return CartResponse.from_cart(_load_cart(customer_id))


@cart_router.get("/count", response_model=CartCountResponse)
async def get_cart_count(customer_id: str = Depends(current_customer)) -> CartCountResponse:
    return CartCountResponse(count=_load_cart(customer_id).total_items)


@cart_router.get("/summary", response_model=CartSummaryResponse)
async def get_cart_summary(customer_id: str = Depends(current_customer)) -> CartSummaryResponse:
    return CartSummaryResponse(**_load_cart(customer_id).summary())


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        size=body.size,
        color=body.color,
        quantity=body.quantity,
    )
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.put("/items", response_model=CartResponse)
async def update_cart_item(body: UpdateCartItemRequest, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = UpdateCartItem(
        customer_id=customer_id,
        product_id=body.product_id,
        size=body.size,
        color=body.color,
        quantity=body.quantity,
    )
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.delete("/items", response_model=CartResponse)
async def remove_cart_item(
    product_id: str = Query(...),
    size: str = Query(...),
    color: str = Query(...),
    customer_id: str = Depends(current_customer),
) -> CartResponse:
    command = RemoveFromCart(customer_id=customer_id, product_id=product_id, size=size, color=color)
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.patch("/items/{item_id}", response_model=CartResponse)
async def update_cart_item_by_id(
    item_id: str, body: UpdateCartItemQuantityRequest, customer_id: str = Depends(current_customer)
) -> CartResponse:
    command = UpdateCartItemById(customer_id=customer_id, item_id=item_id, quantity=body.quantity)
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item_by_id(item_id: str, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = RemoveCartItemById(customer_id=customer_id, item_id=item_id)
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(customer_id: str = Depends(current_customer)) -> CartResponse:
    return _cart_response(current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False))


@cart_router.post("/discount", response_model=CartResponse)
async def apply_discount(body: ApplyDiscountRequest, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = ApplyCartDiscount(
        customer_id=customer_id,
        code=body.code,
        amount=body.amount,
        percentage=body.percentage,
    )
    return _cart_response(current_domain.process(command, asynchronous=False))


@cart_router.delete("/discount", response_model=CartResponse)
async def remove_discount(customer_id: str = Depends(current_customer)) -> CartResponse:
    return _cart_response(current_domain.process(RemoveCartDiscount(customer_id=customer_id), asynchronous=False))


@cart_router.put("/shipping", response_model=CartResponse)
async def change_shipping(body: ShippingMethodRequest, customer_id: str = Depends(current_customer)) -> CartResponse:
    command = ChangeShippingMethod(customer_id=customer_id, method=body.method)
    return _cart_response(current_domain.process(command, asynchronous=False))


# --- Order endpoints ---


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, customer_id: str = Depends(current_customer)) -> OrderIdResponse:
    command = PlaceOrder(
        customer_id=customer_id,
        customer_details=json.dumps(body.customer_details.model_dump()),
        payment_method=body.payment_method,
        customer_notes=body.customer_notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return OrderIdResponse(order_id=order_id, order_number=order.order_number)


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(customer_id: str = Depends(current_customer)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_customer(customer_id)
    return OrderListResponse(orders=[OrderResponse.from_order(o) for o in orders], count=len(orders))


@order_router.get("/admin/all", response_model=OrderListResponse)
async def all_orders(status: str | None = Query(default=None), _: str = Depends(require_admin)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).listing(status=status)
    return OrderListResponse(orders=[OrderResponse.from_order(o) for o in orders], count=len(orders))


@order_router.put("/admin/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, _: str = Depends(require_admin)
) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, admin_notes=body.admin_notes)
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


@order_router.put("/admin/{order_id}/notes", response_model=OrderResponse)
async def add_admin_notes(order_id: str, body: AdminNotesRequest, _: str = Depends(require_admin)) -> OrderResponse:
    current_domain.process(AddAdminNotes(order_id=order_id, admin_notes=body.admin_notes), asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    customer_id: str = Depends(current_customer),
    role: str = Depends(current_role),
) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.customer_id) != customer_id and not is_admin(role):
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderResponse.from_order(order)


# --- Wishlist endpoints ---


def _wishlist_response(customer_id) -> WishlistResponse:
    wishlist = current_domain.repository_for(Wishlist).for_customer(customer_id)
    return WishlistResponse.from_wishlist(customer_id, wishlist)


@wishlist_router.get("", response_model=WishlistResponse)
async def get_wishlist(customer_id: str = Depends(current_customer)) -> WishlistResponse:
    return _wishlist_response(customer_id)


@wishlist_router.get("/check/{product_id}", response_model=WishlistCheckResponse)
async def check_wishlist(product_id: str, customer_id: str = Depends(current_customer)) -> WishlistCheckResponse:
    wishlist = current_domain.repository_for(Wishlist).for_customer(customer_id)
    return WishlistCheckResponse(
        product_id=product_id,
        in_wishlist=wishlist is not None and wishlist.contains(product_id),
    )


@wishlist_router.post("/items", response_model=WishlistResponse)
async def add_to_wishlist(body: AddToWishlistRequest, customer_id: str = Depends(current_customer)) -> WishlistResponse:
    current_domain.process(AddToWishlist(customer_id=customer_id, product_id=body.product_id), asynchronous=False)
    return _wishlist_response(customer_id)


@wishlist_router.delete("/items/{product_id}", response_model=WishlistResponse)
async def remove_from_wishlist(product_id: str, customer_id: str = Depends(current_customer)) -> WishlistResponse:
    current_domain.process(RemoveFromWishlist(customer_id=customer_id, product_id=product_id), asynchronous=False)
    return _wishlist_response(customer_id)


@wishlist_router.delete("", response_model=WishlistResponse)
async def clear_wishlist(customer_id: str = Depends(current_customer)) -> WishlistResponse:
    current_domain.process(ClearWishlist(customer_id=customer_id), asynchronous=False)
    return _wishlist_response(customer_id)


# --- Maintenance endpoints ---


@maintenance_router.post("/expire-carts", response_model=ExpireCartsResponse)
async def run_cart_expiry(
    body: ExpireCartsRequest | None = None, _: str = Depends(require_admin)
) -> ExpireCartsResponse:
    """Sweep expired carts. Intended for an external scheduler holding admin credentials."""
    return ExpireCartsResponse(expired=expire_carts(body.as_of if body else None))
