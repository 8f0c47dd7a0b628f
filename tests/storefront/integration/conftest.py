import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.cart import cart_router
from storefront.api.catalog import catalog_router
from storefront.api.checkout import checkout_router
from storefront.api.errors import register_error_handlers
from storefront.api.orders import order_router
from storefront.api.promos import promo_router


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (catalog_router, cart_router, promo_router, checkout_router, order_router):
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def product_payload():
    return {
        "name": "Trail Runner",
        "description": "Lightweight trail running shoe",
        "category": "Footwear",
        "brand": "Northpeak",
        "images": ["https://cdn.example.com/trail-runner.jpg"],
        "tags": ["running"],
        "variants": [
            {"name": "42 / Blue", "sku": "TR-42-BLU", "price": 80.0, "stock": 5, "attributes": {"size": "42"}},
            {"name": "43 / Blue", "sku": "TR-43-BLU", "price": 85.0, "stock": 0},
        ],
    }
