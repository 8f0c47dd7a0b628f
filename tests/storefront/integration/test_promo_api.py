"""Integration tests for the promo code endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ExpectedVersionError


@pytest.fixture()
def promo_payload():
    now = datetime.now(UTC)
    return {
        "code": "spring25",
        "description": "Spring sale",
        "discount_type": "percentage",
        "value": 25.0,
        "max_discount": 20.0,
        "valid_from": (now - timedelta(days=1)).isoformat(),
        "valid_to": (now + timedelta(days=10)).isoformat(),
        "max_uses": 100,
    }


def _create(client, payload):
    response = client.post("/promos", json=payload)
    assert response.status_code == 201
    return response.json()["promo_id"]


class TestPromoEndpoints:
    def test_create_and_get(self, client, promo_payload):
        promo_id = _create(client, promo_payload)
        data = client.get(f"/promos/{promo_id}").json()
        assert data["code"] == "SPRING25"
        assert data["used_count"] == 0
        assert data["usage_percentage"] == 0.0
        assert data["is_expired"] is False

    def test_duplicate_code_is_409(self, client, promo_payload):
        _create(client, promo_payload)
        response = client.post("/promos", json=promo_payload)
        assert response.status_code == 409
        assert response.json()["code"] == "DuplicatePromoCode"

    def test_reversed_window_is_400(self, client, promo_payload):
        payload = {**promo_payload, "valid_from": promo_payload["valid_to"], "valid_to": promo_payload["valid_from"]}
        assert client.post("/promos", json=payload).status_code == 400

    def test_validate(self, client, promo_payload):
        _create(client, promo_payload)
        data = client.get("/promos/validate/SPRING25", params={"subtotal": 200.0}).json()
        assert data["is_valid"] is True
        assert data["discount"] == 20.0
        assert data["promo"]["code"] == "SPRING25"

    def test_validate_unknown(self, client):
        data = client.get("/promos/validate/NOPE", params={"subtotal": 50.0}).json()
        assert data == {"is_valid": False, "discount": 0.0, "promo": None}

    def test_update(self, client, promo_payload):
        promo_id = _create(client, promo_payload)
        response = client.patch(f"/promos/{promo_id}", json={"is_active": False})
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_delete(self, client, promo_payload):
        promo_id = _create(client, promo_payload)
        assert client.delete(f"/promos/{promo_id}").status_code == 200
        assert client.get(f"/promos/{promo_id}").status_code == 404

    def test_list_and_analytics(self, client, promo_payload):
        _create(client, promo_payload)
        _create(client, {**promo_payload, "code": "FLAT5", "discount_type": "fixed", "value": 5.0})

        data = client.get("/promos", params={"discount_type": "fixed"}).json()
        assert [p["code"] for p in data["promo_codes"]] == ["FLAT5"]

        stats = client.get("/promos/analytics").json()
        assert stats["total_promo_codes"] == 2
        assert stats["by_type"]["percentage"]["count"] == 1


class TestConcurrentUpdate:
    def test_version_conflict_is_409(self, client, monkeypatch):
        def _stale(code, subtotal):
            raise ExpectedVersionError("Wrong expected version: 1 (Schema: promo_code, Version: 2)")

        monkeypatch.setattr("storefront.api.promos.validate_promo", _stale)
        response = client.get("/promos/validate/SPRING25", params={"subtotal": 50})

        assert response.status_code == 409
        assert response.json()["code"] == "ExpectedVersionError"
        assert "_entity" in response.json()["error"]
