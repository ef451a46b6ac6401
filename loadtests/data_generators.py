"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the storefront's validation rules
and match the exact field names expected by the API's Pydantic request
schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SIZES = ["XS", "S", "M", "L", "XL"]
COLORS = ["Black", "White", "Red", "Navy", "Olive"]
CATEGORIES = ["shirts", "dresses", "trousers", "outerwear", "accessories"]
SHIPPING_METHODS = ["standard", "express", "overnight"]


def customer_id() -> str:
    """Generate customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def inventory_entries(variants: int = 3, quantity: tuple[int, int] = (5, 50)) -> list[dict]:
    """Distinct size/color entries with random on-hand quantities."""
    pairs = random.sample([(s, c) for s in SIZES for c in COLORS], variants)
    return [{"size": s, "color": c, "quantity": random.randint(*quantity)} for s, c in pairs]


def product_data(inventory: list[dict] | None = None) -> dict:
    """Generate CreateProductRequest payload matching schema field names."""
    price = round(random.uniform(9.99, 149.99), 2)
    on_sale = random.random() < 0.3
    return {
        "name": f"{fake.color_name()} {fake.word().capitalize()}"[:100],
        "description": fake.sentence(nb_words=12),
        "category": random.choice(CATEGORIES),
        "brand": fake.company()[:50],
        "price": price,
        "original_price": round(price * 1.25, 2) if on_sale else None,
        "inventory": inventory if inventory is not None else inventory_entries(),
    }


def catalogue_query() -> dict:
    """Query parameters for GET /products, mixing the filters shoppers use."""
    params = {"page": random.randint(1, 3), "limit": random.choice([12, 24])}
    if random.random() < 0.5:
        params["category"] = random.choice(CATEGORIES)
    if random.random() < 0.3:
        params["sizes"] = ",".join(random.sample(SIZES, 2))
    if random.random() < 0.2:
        params["on_sale"] = "true"
    if random.random() < 0.4:
        params["sort_by"] = "price"
        params["sort_order"] = random.choice(["asc", "desc"])
    return params


def cart_item_data(product_id: str, entry: dict, quantity: int = 1) -> dict:
    return {
        "product_id": product_id,
        "size": entry["size"],
        "color": entry["color"],
        "quantity": quantity,
    }


def discount_data() -> dict:
    """Either a fixed amount or a percentage, never both."""
    code = f"LT{random.randint(100, 999)}"
    if random.random() < 0.5:
        return {"code": code, "amount": round(random.uniform(1, 15), 2)}
    return {"code": code, "percentage": random.choice([5, 10, 15, 20])}


def customer_details() -> dict:
    """Generate CustomerDetailsSchema payload."""
    return {
        "first_name": fake.first_name()[:100],
        "last_name": fake.last_name()[:100],
        "email": fake.email(),
        "phone": fake.numerify("###-###-####"),
        "address": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
    }


def checkout_data() -> dict:
    """Generate PlaceOrderRequest payload."""
    return {
        "customer_details": customer_details(),
        "payment_method": "Cash on Delivery",
        "customer_notes": fake.sentence() if random.random() < 0.2 else None,
    }
