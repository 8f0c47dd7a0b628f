import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Factories (persisted through the real command handlers)
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    from storefront.catalog.management import CreateProduct
    from storefront.catalog.product import Product

    counter = {"n": 0}

    def _make(name="Trail Runner", category="Footwear", brand="Northpeak", variants=None, **overrides):
        counter["n"] += 1
        variants = variants or [{"name": "Default", "sku": f"SKU-{counter['n']:04d}", "price": 25.0, "stock": 10}]
        command = CreateProduct(
            name=name,
            description=overrides.pop("description", f"{name} description"),
            category=category,
            brand=brand,
            images=json.dumps(overrides.pop("images", [])),
            tags=json.dumps(overrides.pop("tags", [])),
            variants=json.dumps(variants),
            is_active=overrides.pop("is_active", True),
        )
        product_id = current_domain.process(command, asynchronous=False)
        return current_domain.repository_for(Product).get(product_id)

    return _make


@pytest.fixture()
def make_promo():
    from storefront.promotion.management import CreatePromoCode
    from storefront.promotion.promo_code import PromoCode

    def _make(code="SAVE20", discount_type="percentage", value=20.0, **overrides):
        now = datetime.now(UTC)
        command = CreatePromoCode(
            code=code,
            discount_type=discount_type,
            value=value,
            valid_from=overrides.pop("valid_from", now - timedelta(days=1)),
            valid_to=overrides.pop("valid_to", now + timedelta(days=30)),
            **overrides,
        )
        promo_id = current_domain.process(command, asynchronous=False)
        return current_domain.repository_for(PromoCode).get(promo_id)

    return _make


@pytest.fixture()
def new_cart():
    from storefront.cart.management import CreateOrGetCart

    def _make(token=None):
        return current_domain.process(CreateOrGetCart(token=token), asynchronous=False)["token"]

    return _make


@pytest.fixture()
def add_to_cart():
    from storefront.cart.items import AddToCart

    def _add(token, product, quantity=1, variant=None):
        variant = variant or product.variants[0]
        return current_domain.process(
            AddToCart(token=token, product_id=product.id, variant_id=variant.id, quantity=quantity),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def checkout_details():
    return {
        "customer": {
            "email": "Ada@Example.com",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "phone": "+44 20 7946 0000",
        },
        "shipping_address": {
            "street": "12 Analytical Row",
            "city": "London",
            "state": "Greater London",
            "zip_code": "NW1 6XE",
            "country": "UK",
        },
        "payment_method": "credit_card",
    }
