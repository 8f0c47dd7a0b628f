"""Flash sale stress scenario.

Every user races for the same few low-stock variants and the same
capped promo code. After the run, stock must never be negative and the
promo's used_count must never exceed max_uses; losers see 400/409.
"""

import random

import requests
from locust import HttpUser, constant_pacing, events, task

from loadtests.data_generators import checkout_data, product_data, promo_data
from loadtests.helpers.response import error_code, extract_error_detail

FLASH_PROMO = "FLASHSALE"
FLASH_PROMO_USES = 25
_sale = {"variants": []}


@events.test_start.add_listener
def seed_flash_sale(environment, **_kwargs):
    """Create the contested products and promo once per run."""
    if not environment.host:
        return

    for _ in range(3):
        resp = requests.post(f"{environment.host}/api/catalog/products", json=product_data(variant_count=1, stock=20))
        if resp.status_code == 201:
            product_id = resp.json()["product_id"]
            product = requests.get(f"{environment.host}/api/catalog/products/{product_id}").json()
            _sale["variants"].append((product_id, product["variants"][0]["id"]))

    promo = {**promo_data(code=FLASH_PROMO, max_uses=FLASH_PROMO_USES), "min_order_amount": None}
    requests.post(f"{environment.host}/api/promos", json=promo)


class FlashSaleUser(HttpUser):
    """One cart, one contested line, one checkout per iteration."""

    wait_time = constant_pacing(0.2)

    @task
    def buy(self):
        if not _sale["variants"]:
            return
        product_id, variant_id = random.choice(_sale["variants"])

        resp = self.client.post("/api/cart", name="[FLASH] POST /api/cart")
        if resp.status_code != 201:
            return
        token = resp.json()["token"]

        with self.client.post(
            f"/api/cart/{token}/items",
            json={"product_id": product_id, "variant_id": variant_id, "quantity": 1},
            catch_response=True,
            name="[FLASH] POST /api/cart/{token}/items",
        ) as resp:
            if resp.status_code != 200:
                if error_code(resp) == "InsufficientStock":
                    resp.success()
                return

        with self.client.post(
            "/api/checkout",
            json=checkout_data(token, promo=FLASH_PROMO),
            catch_response=True,
            name="[FLASH] POST /api/checkout",
        ) as resp:
            if resp.status_code in (201, 409) or error_code(resp) in {"InsufficientStock", "InvalidPromo"}:
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
