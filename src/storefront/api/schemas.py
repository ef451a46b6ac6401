"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and aggregates. Responses are built explicitly from
aggregate attributes by the ``from_*`` constructors.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class InventoryEntrySchema(BaseModel):
    size: str
    color: str
    quantity: int = Field(ge=0, default=0)


class InventoryRecordSchema(InventoryEntrySchema):
    reserved: int = 0
    available: int = 0


class CreateProductRequest(BaseModel):
    name: str
    category: str
    price: float = Field(ge=0)
    original_price: float | None = Field(default=None, ge=0)
    description: str | None = None
    brand: str | None = None
    inventory: list[InventoryEntrySchema] = []

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Linen Shirt",
                    "category": "shirts",
                    "price": 29.99,
                    "original_price": 39.99,
                    "inventory": [
                        {"size": "M", "color": "White", "quantity": 10},
                        {"size": "L", "color": "White", "quantity": 4},
                    ],
                }
            ]
        }
    }


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)
    original_price: float | None = Field(default=None, ge=0)


class SetInventoryRequest(InventoryEntrySchema):
    pass


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    category: str
    brand: str | None = None
    price: float
    original_price: float | None = None
    is_active: bool
    in_stock: bool
    total_stock: int
    available_stock: int
    inventory: list[InventoryRecordSchema]

    @classmethod
    def from_product(cls, product):
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            category=product.category,
            brand=product.brand,
            price=product.price,
            original_price=product.original_price,
            is_active=product.is_active,
            in_stock=product.in_stock,
            total_stock=product.total_stock,
            available_stock=product.available_stock,
            inventory=[
                InventoryRecordSchema(
                    size=record.size,
                    color=record.color,
                    quantity=record.quantity,
                    reserved=record.reserved,
                    available=record.available,
                )
                for record in product.inventory or []
            ],
        )


class AvailabilityResponse(BaseModel):
    product_id: str
    size: str
    color: str
    available: int
    is_available: bool


class PaginationSchema(BaseModel):
    current_page: int
    total_pages: int
    total_products: int
    has_next_page: bool
    has_prev_page: bool


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    pagination: PaginationSchema

    @classmethod
    def from_page(cls, page):
        return cls(
            products=[ProductResponse.from_product(p) for p in page.products],
            pagination=PaginationSchema(
                current_page=page.page,
                total_pages=page.total_pages,
                total_products=page.total,
                has_next_page=page.has_next,
                has_prev_page=page.has_previous,
            ),
        )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    size: str
    color: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(BaseModel):
    product_id: str
    size: str
    color: str
    quantity: int


class UpdateCartItemQuantityRequest(BaseModel):
    quantity: int


class ApplyDiscountRequest(BaseModel):
    code: str = Field(min_length=1)
    amount: float | None = Field(default=None, ge=0)
    percentage: float | None = Field(default=None, ge=0, le=100)


class ShippingMethodRequest(BaseModel):
    method: str


class CartItemSchema(BaseModel):
    id: str
    product_id: str
    product_name: str | None = None
    size: str
    color: str
    quantity: int
    price: float
    original_price: float | None = None
    line_total: float


class ShippingSchema(BaseModel):
    method: str
    cost: float
    estimated_days: int


class DiscountSchema(BaseModel):
    code: str
    amount: float
    percentage: float | None = None


class CartSummaryResponse(BaseModel):
    item_count: int
    total_items: int
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    savings: float
    eligible_for_free_shipping: bool


class CartResponse(BaseModel):
    id: str
    customer_id: str
    items: list[CartItemSchema]
    subtotal: float
    tax: float
    shipping: ShippingSchema
    discount: DiscountSchema | None = None
    total: float
    total_items: int
    savings: float
    eligible_for_free_shipping: bool
    expires_at: datetime | None = None
    is_active: bool

    @classmethod
    def from_cart(cls, cart):
        discount = None
        if cart.discount:
            discount = DiscountSchema(
                code=cart.discount.code,
                amount=cart.discount.amount,
                percentage=cart.discount.percentage or None,
            )
        return cls(
            id=str(cart.id),
            customer_id=str(cart.customer_id),
            items=[
                CartItemSchema(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    size=item.size,
                    color=item.color,
                    quantity=item.quantity,
                    price=item.price,
                    original_price=item.original_price,
                    line_total=item.line_total,
                )
                for item in cart.items or []
            ],
            subtotal=cart.subtotal or 0.0,
            tax=cart.tax or 0.0,
            shipping=ShippingSchema(
                method=cart.shipping.method,
                cost=cart.shipping.cost,
                estimated_days=cart.shipping.estimated_days,
            ),
            discount=discount,
            total=cart.total or 0.0,
            total_items=cart.total_items,
            savings=cart.savings,
            eligible_for_free_shipping=cart.eligible_for_free_shipping,
            expires_at=cart.expires_at,
            is_active=cart.is_active,
        )


class CartCountResponse(BaseModel):
    count: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CustomerDetailsSchema(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"


class PlaceOrderRequest(BaseModel):
    customer_details: CustomerDetailsSchema
    payment_method: str | None = None
    customer_notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_details": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "email": "ada@example.com",
                        "phone": "555-0100",
                        "address": "12 Analytical Way",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                    },
                    "payment_method": "Cash on Delivery",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str
    admin_notes: str | None = None


class AdminNotesRequest(BaseModel):
    admin_notes: str


class OrderIdResponse(BaseModel):
    order_id: str
    order_number: str


class OrderItemSchema(BaseModel):
    product_id: str
    product_name: str | None = None
    size: str
    color: str
    quantity: int
    price: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    customer_details: CustomerDetailsSchema
    items: list[OrderItemSchema]
    subtotal: float
    shipping_cost: float
    shipping_method: str | None = None
    tax: float
    discount: float
    discount_code: str | None = None
    total: float
    total_items: int
    payment_method: str
    status: str
    status_display: str
    admin_notes: str | None = None
    customer_notes: str | None = None
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order):
        details = order.customer_details
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            customer_details=CustomerDetailsSchema(
                first_name=details.first_name,
                last_name=details.last_name,
                email=details.email,
                phone=details.phone,
                address=details.address,
                city=details.city,
                state=details.state,
                zip_code=details.zip_code,
                country=details.country or "USA",
            ),
            items=[
                OrderItemSchema(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    size=item.size,
                    color=item.color,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order.items or []
            ],
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost or 0.0,
            shipping_method=order.shipping_method,
            tax=order.tax or 0.0,
            discount=order.discount or 0.0,
            discount_code=order.discount_code,
            total=order.total,
            total_items=order.total_items,
            payment_method=order.payment_method,
            status=order.status,
            status_display=order.status_display,
            admin_notes=order.admin_notes,
            customer_notes=order.customer_notes,
            estimated_delivery=order.estimated_delivery,
            actual_delivery=order.actual_delivery,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


# ---------------------------------------------------------------------------
# Wishlist
# ---------------------------------------------------------------------------
class AddToWishlistRequest(BaseModel):
    product_id: str


class WishlistItemSchema(BaseModel):
    product_id: str
    added_at: datetime | None = None


class WishlistResponse(BaseModel):
    customer_id: str
    items: list[WishlistItemSchema]
    item_count: int

    @classmethod
    def from_wishlist(cls, customer_id, wishlist):
        items = wishlist.items if wishlist else []
        return cls(
            customer_id=str(customer_id),
            items=[WishlistItemSchema(product_id=str(i.product_id), added_at=i.added_at) for i in items or []],
            item_count=len(items or []),
        )


class WishlistCheckResponse(BaseModel):
    product_id: str
    in_wishlist: bool


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------
class ExpireCartsRequest(BaseModel):
    as_of: datetime | None = None

    @field_validator("as_of")
    @classmethod
    def not_in_future(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        if v.tzinfo is None:
            v = v.replace(tzinfo=UTC)
        if v > datetime.now(UTC):
            raise ValueError("as_of cannot be in the future")
        return v


class ExpireCartsResponse(BaseModel):
    expired: int
