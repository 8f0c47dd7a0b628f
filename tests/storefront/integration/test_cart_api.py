"""Integration tests for the cart endpoints."""

import pytest


@pytest.fixture()
def product(client, product_payload):
    product_id = client.post("/catalog/products", json=product_payload).json()["product_id"]
    return client.get(f"/catalog/products/{product_id}").json()


@pytest.fixture()
def token(client):
    response = client.post("/cart")
    assert response.status_code == 201
    return response.json()["token"]


def _line_path(token, product):
    return f"/cart/{token}/items/{product['id']}/{product['variants'][0]['id']}"


def _add(client, token, product, quantity=1):
    return client.post(
        f"/cart/{token}/items",
        json={"product_id": product["id"], "variant_id": product["variants"][0]["id"], "quantity": quantity},
    )


class TestCartEndpoints:
    def test_new_cart_is_empty(self, client, token):
        data = client.get(f"/cart/{token}").json()
        assert data["items"] == []
        assert data["total"] == 0.0

    def test_create_with_existing_token_returns_cart(self, client, token):
        response = client.post("/cart", json={"token": token})
        assert response.json()["token"] == token

    def test_unknown_cart_is_404(self, client):
        response = client.get("/cart/cart_missing")
        assert response.status_code == 404
        assert response.json()["code"] == "CartNotFound"
        assert "cart" in response.json()["error"]

    def test_updating_line_not_in_cart_is_404(self, client, token, product):
        response = client.put(_line_path(token, product), json={"quantity": 2})
        assert response.status_code == 404
        assert response.json()["code"] == "ItemNotFound"
        assert "item" in response.json()["error"]

    def test_add_item(self, client, token, product):
        response = _add(client, token, product, quantity=2)
        assert response.status_code == 200
        data = response.json()
        assert data["subtotal"] == 160.0
        assert data["items"][0]["sku"] == "TR-42-BLU"

    def test_get_cart_reports_live_stock(self, client, token, product):
        _add(client, token, product)
        line = client.get(f"/cart/{token}").json()["items"][0]
        assert line["is_active"] is True
        assert line["stock"] == 5

    def test_add_beyond_stock_is_400(self, client, token, product):
        response = _add(client, token, product, quantity=6)
        assert response.status_code == 400
        assert response.json()["code"] == "InsufficientStock"

    def test_update_and_remove(self, client, token, product):
        _add(client, token, product)
        response = client.put(_line_path(token, product), json={"quantity": 3})
        assert response.json()["items"][0]["quantity"] == 3

        response = client.delete(_line_path(token, product))
        assert response.json()["items"] == []

    def test_clear(self, client, token, product):
        _add(client, token, product)
        response = client.delete(f"/cart/{token}")
        assert response.json()["items"] == []


class TestCartPromoEndpoints:
    @pytest.fixture()
    def promo(self, make_promo):
        return make_promo(code="SAVE10", value=10.0)

    def test_apply_and_remove_promo(self, client, token, product, promo):
        _add(client, token, product)
        response = client.post(f"/cart/{token}/promo", json={"code": "save10"})
        assert response.status_code == 200
        assert response.json()["discount"] == 8.0
        assert response.json()["total"] == 72.0

        response = client.delete(f"/cart/{token}/promo")
        assert response.json()["promo_code"] is None
        assert response.json()["total"] == 80.0

    def test_invalid_promo_is_400(self, client, token, product):
        _add(client, token, product)
        response = client.post(f"/cart/{token}/promo", json={"code": "NOPE"})
        assert response.status_code == 400
        assert response.json()["code"] == "InvalidPromo"
