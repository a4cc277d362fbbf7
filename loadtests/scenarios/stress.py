"""Stress test scenarios.

CheckoutFloodUser hammers order placement to stress stock reservation on
a handful of hot products. SpikeUser simulates a sudden browse burst,
such as a flash sale announcement.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import checkout_data, order_items, search_term


class CheckoutFloodUser(HttpUser):
    """Stress test: concurrent checkouts against the best sellers.

    Every order withdraws stock from the same few products, so the
    all-or-nothing reservation is exercised under contention. A 400 with
    an out-of-stock message is an expected outcome once shelves empty.
    """

    wait_time = constant_pacing(0.2)

    def on_start(self):
        resp = self.client.get("/products", params={"sort": "-sold", "limit": 5}, name="[STRESS] GET /products")
        self.hot_products = resp.json()["items"] if resp.status_code == 200 else []

    @task(5)
    def checkout(self):
        items = order_items(self.hot_products, max_lines=1)
        if not items:
            return
        with self.client.post(
            "/orders",
            json=checkout_data(items),
            catch_response=True,
            name="[STRESS] POST /orders",
        ) as resp:
            if resp.status_code == 400 and "in stock" in resp.text:
                resp.success()

    @task(1)
    def refresh(self):
        resp = self.client.get("/products", params={"sort": "-sold", "limit": 5}, name="[STRESS] GET /products")
        if resp.status_code == 200:
            self.hot_products = resp.json()["items"]


class SpikeUser(HttpUser):
    """Stress test: read burst with no think time."""

    wait_time = constant_pacing(0.05)

    @task(4)
    def browse(self):
        self.client.get(
            "/products",
            params={"hot": True, "page": random.randint(1, 3), "lang": random.choice(["vi", "zh"])},
            name="[STRESS] GET /products?hot",
        )

    @task(2)
    def search(self):
        self.client.get("/products/search", params={"q": search_term()}, name="[STRESS] GET /products/search")

    @task(1)
    def health(self):
        self.client.get("/health", name="[STRESS] GET /health")
