"""Storefront load test scenarios.

Stateful SequentialTaskSet journeys for the shopper path (browse, fill a
cart, price it, check out) and for staff (seed the catalog and promos,
then move orders through fulfilment and payment).
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, product_data, promo_data, search_term
from loadtests.helpers.response import error_code, extract_error_detail
from loadtests.helpers.state import CartState, CatalogState, OrderState

# Outcomes a shopper can legitimately hit when other users buy the same stock
_EXPECTED_CHECKOUT_ERRORS = {"InsufficientStock", "InvalidPromo", "ProductUnavailable"}


def _collect_variants(client, state: CatalogState):
    """Fill ``state`` with in-stock variants from the first catalog pages."""
    with client.get(
        "/api/catalog/products",
        params={"page": random.randint(1, 3), "limit": 20},
        catch_response=True,
        name="GET /api/catalog/products",
    ) as resp:
        if resp.status_code != 200:
            resp.failure(f"List products failed: {resp.status_code} — {extract_error_detail(resp)}")
            return
        product_ids = [p["id"] for p in resp.json()["products"] if p["total_stock"] > 0]

    for product_id in random.sample(product_ids, min(3, len(product_ids))):
        resp = client.get(f"/api/catalog/products/{product_id}", name="GET /api/catalog/products/{id}")
        if resp.status_code == 200:
            state.variants.extend(
                (product_id, v["id"], v["stock"]) for v in resp.json()["available_variants"]
            )


class ShopperJourney(SequentialTaskSet):
    """Browse -> Create Cart -> Add Items -> Update -> Promo -> Price -> Validate -> Checkout."""

    def on_start(self):
        self.catalog = CatalogState()
        self.cart = CartState()
        self.order = OrderState()

    @task
    def browse(self):
        _collect_variants(self.client, self.catalog)
        if not self.catalog.variants:
            self.interrupt()

    @task
    def create_cart(self):
        with self.client.post("/api/cart", catch_response=True, name="POST /api/cart") as resp:
            if resp.status_code == 201:
                self.cart.token = resp.json()["token"]
            else:
                resp.failure(f"Create cart failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_items(self):
        for product_id, variant_id, stock in random.sample(self.catalog.variants, min(3, len(self.catalog.variants))):
            with self.client.post(
                f"/api/cart/{self.cart.token}/items",
                json={"product_id": product_id, "variant_id": variant_id, "quantity": min(stock, random.randint(1, 3))},
                catch_response=True,
                name="POST /api/cart/{token}/items",
            ) as resp:
                if resp.status_code == 200:
                    self.cart.line_count = len(resp.json()["items"])
                    self.cart.subtotal = resp.json()["subtotal"]
                elif error_code(resp) == "InsufficientStock":
                    resp.success()
                else:
                    resp.failure(f"Add item failed: {resp.status_code} — {extract_error_detail(resp)}")
        if not self.cart.line_count:
            self.interrupt()

    @task
    def view_cart(self):
        self.client.get(f"/api/cart/{self.cart.token}", name="GET /api/cart/{token}")

    @task
    def apply_promo(self):
        resp = self.client.get("/api/promos", params={"is_active": True, "limit": 20}, name="GET /api/promos")
        if resp.status_code != 200 or not resp.json()["promo_codes"]:
            return
        code = random.choice(resp.json()["promo_codes"])["code"]
        with self.client.post(
            f"/api/cart/{self.cart.token}/promo",
            json={"code": code},
            catch_response=True,
            name="POST /api/cart/{token}/promo",
        ) as resp:
            if resp.status_code == 200:
                self.cart.promo_code = code
            elif error_code(resp) == "InvalidPromo":
                resp.success()
            else:
                resp.failure(f"Apply promo failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def calculate(self):
        self.client.post(
            "/api/checkout/calculate",
            json={"cart_token": self.cart.token},
            name="POST /api/checkout/calculate",
        )

    @task
    def validate(self):
        with self.client.post(
            "/api/checkout/validate",
            json={"cart_token": self.cart.token},
            catch_response=True,
            name="POST /api/checkout/validate",
        ) as resp:
            if resp.status_code == 200 and not resp.json()["is_valid"]:
                # Someone else bought the stock in the meantime
                self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            "/api/checkout",
            json=checkout_data(self.cart.token),
            catch_response=True,
            name="POST /api/checkout",
        ) as resp:
            if resp.status_code == 201:
                self.order.order_id = resp.json()["id"]
                self.order.order_number = resp.json()["order_number"]
            elif error_code(resp) in _EXPECTED_CHECKOUT_ERRORS or resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def track_order(self):
        if self.order.order_number:
            self.client.get(f"/api/orders/number/{self.order.order_number}", name="GET /api/orders/number/{n}")

    @task
    def done(self):
        self.interrupt()


class BrowsingJourney(SequentialTaskSet):
    """Categories -> Filtered listing -> Search -> Product detail. Read-only."""

    @task
    def categories(self):
        resp = self.client.get("/api/catalog/categories", name="GET /api/catalog/categories")
        self.category = random.choice(resp.json()) if resp.status_code == 200 and resp.json() else None

    @task
    def filtered_listing(self):
        params = {"sort_by": random.choice(["name", "price", "created_at"]), "sort_order": "asc"}
        if self.category:
            params["category"] = self.category
        self.client.get("/api/catalog/products", params=params, name="GET /api/catalog/products?filters")

    @task
    def search(self):
        self.client.get("/api/catalog/search", params={"q": search_term()}, name="GET /api/catalog/search")

    @task
    def done(self):
        self.interrupt()


class StaffJourney(SequentialTaskSet):
    """Seed Product -> Seed Promo -> Confirm -> Pay -> Ship -> Deliver the oldest pending order."""

    def on_start(self):
        self.order = OrderState()

    @task
    def create_product(self):
        with self.client.post(
            "/api/catalog/products",
            json=product_data(),
            catch_response=True,
            name="POST /api/catalog/products",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Create product failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def create_promo(self):
        if random.random() < 0.3:
            self.client.post("/api/promos", json=promo_data(max_uses=random.choice([None, 50])), name="POST /api/promos")

    @task
    def pick_order(self):
        resp = self.client.get(
            "/api/orders",
            params={"status": "pending", "sort_by": "created_at", "sort_order": "asc", "limit": 5},
            name="GET /api/orders?status=pending",
        )
        if resp.status_code != 200 or not resp.json()["orders"]:
            self.interrupt()
            return
        self.order.order_id = random.choice(resp.json()["orders"])["id"]

    @task
    def confirm(self):
        self._set_status("confirmed")

    @task
    def pay(self):
        with self.client.put(
            f"/api/orders/{self.order.order_id}/payment",
            json={"payment_status": "paid"},
            catch_response=True,
            name="PUT /api/orders/{id}/payment",
        ) as resp:
            if resp.status_code == 200:
                self.order.payment_status = "paid"
            elif resp.status_code in (400, 409):
                # Another staff user got there first
                resp.success()

    @task
    def ship(self):
        self._set_status("shipped", tracking_number=f"1Z{random.randint(10**9, 10**10 - 1)}")

    @task
    def deliver(self):
        self._set_status("delivered")

    @task
    def done(self):
        self.interrupt()

    def _set_status(self, status, **extra):
        with self.client.put(
            f"/api/orders/{self.order.order_id}/status",
            json={"status": status, **extra},
            catch_response=True,
            name="PUT /api/orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.order.current_status = status
            elif resp.status_code in (400, 409):
                resp.success()
                self.interrupt()


class ShopperUser(HttpUser):
    wait_time = between(1.0, 4.0)
    tasks = [ShopperJourney]


class BrowsingUser(HttpUser):
    wait_time = between(0.5, 2.0)
    tasks = [BrowsingJourney]


class StaffUser(HttpUser):
    wait_time = between(2.0, 5.0)
    tasks = [StaffJourney]
