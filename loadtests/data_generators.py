"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's Pydantic request
schemas and the domain's own checks (unique SKUs, well-formed emails,
ordered promo windows).
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

CATEGORIES = ["Footwear", "Apparel", "Outdoor", "Home", "Accessories"]
BRANDS = ["Northpeak", "Woolly", "Riverstone", "Lumen", "Atlas"]
PAYMENT_METHODS = ["credit_card", "paypal", "stripe"]


# ---------- Catalog ----------


def unique_sku(prefix: str = "LT") -> str:
    """SKUs like 'LT-1A2B3C4D', unique across the whole run."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def variant_data(price: float | None = None, stock: int | None = None) -> dict:
    size = random.choice(["S", "M", "L", "XL"])
    color = fake.color_name()
    return {
        "name": f"{size} / {color}"[:100],
        "sku": unique_sku(),
        "price": price if price is not None else round(random.uniform(5.0, 250.0), 2),
        "stock": stock if stock is not None else random.randint(20, 500),
        "attributes": {"size": size, "color": color},
    }


def product_data(variant_count: int | None = None, stock: int | None = None) -> dict:
    """CreateProductRequest payload."""
    word = fake.word().capitalize()
    return {
        "name": f"{word} {fake.word()}"[:200],
        "description": fake.paragraph(nb_sentences=3)[:2000],
        "category": random.choice(CATEGORIES),
        "brand": random.choice(BRANDS),
        "images": [f"https://cdn.example.com/{uuid.uuid4().hex[:12]}.jpg"],
        "tags": fake.words(nb=random.randint(1, 4)),
        "variants": [variant_data(stock=stock) for _ in range(variant_count or random.randint(1, 4))],
    }


def search_term() -> str:
    return fake.word()


# ---------- Promotions ----------


def promo_code() -> str:
    return f"LT{uuid.uuid4().hex[:8].upper()}"


def promo_data(code: str | None = None, max_uses: int | None = None) -> dict:
    """CreatePromoRequest payload valid from yesterday for a month."""
    now = datetime.now(UTC)
    percentage = random.random() < 0.6
    return {
        "code": code or promo_code(),
        "description": fake.catch_phrase()[:200],
        "discount_type": "percentage" if percentage else "fixed",
        "value": float(random.choice([5, 10, 15, 20, 25])) if percentage else float(random.choice([5, 10, 20])),
        "max_discount": 50.0 if percentage else None,
        "min_order_amount": random.choice([None, 20.0, 50.0]),
        "valid_from": (now - timedelta(days=1)).isoformat(),
        "valid_to": (now + timedelta(days=30)).isoformat(),
        "max_uses": max_uses,
    }


# ---------- Checkout ----------


def customer_data() -> dict:
    return {
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "first_name": fake.first_name()[:50],
        "last_name": fake.last_name()[:50],
        "phone": fake.msisdn()[:20],
    }


def address_data() -> dict:
    return {
        "street": fake.street_address()[:200],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.zipcode()[:20],
        "country": "US",
    }


def checkout_data(cart_token: str, promo: str | None = None) -> dict:
    """CheckoutRequest payload; billing defaults to shipping half of the time."""
    shipping = address_data()
    return {
        "cart_token": cart_token,
        "customer": customer_data(),
        "shipping_address": shipping,
        "billing_address": address_data() if random.random() < 0.5 else None,
        "payment_method": random.choice(PAYMENT_METHODS),
        "promo_code": promo,
        "notes": fake.sentence()[:500] if random.random() < 0.2 else None,
    }
