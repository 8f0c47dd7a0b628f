"""The API modules must import cleanly in any order, as domain discovery loads them."""

import importlib
import sys

import pytest


@pytest.fixture()
def fresh_api_modules(monkeypatch):
    import storefront

    monkeypatch.setattr(storefront, "api", sys.modules["storefront.api"])
    for name in [name for name in sys.modules if name == "storefront.api" or name.startswith("storefront.api.")]:
        monkeypatch.delitem(sys.modules, name)


@pytest.mark.parametrize(
    "module, router",
    [
        ("storefront.api.cart", "cart_router"),
        ("storefront.api.catalog", "catalog_router"),
        ("storefront.api.checkout", "checkout_router"),
        ("storefront.api.orders", "order_router"),
        ("storefront.api.promos", "promo_router"),
    ],
)
def test_router_module_imports_first(fresh_api_modules, module, router):
    loaded = importlib.import_module(module)
    assert getattr(loaded, router).routes

