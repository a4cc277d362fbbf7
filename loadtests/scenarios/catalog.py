"""Catalog load test scenarios.

Read-heavy browsing journeys for shoppers, plus an admin journey that
builds and tears down a category and a product. Admin journeys log in
with the account named by ``LOADTEST_ADMIN_EMAIL``/``LOADTEST_ADMIN_PASSWORD``
(create one with ``python src/manage.py create-admin``).
"""

import os
import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import category_data, product_data, product_update_data, search_term
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import BrowsingState, CatalogAdminState

ADMIN_EMAIL = os.environ.get("LOADTEST_ADMIN_EMAIL", "admin@furnishop.local")
ADMIN_PASSWORD = os.environ.get("LOADTEST_ADMIN_PASSWORD", "admin123")


def admin_login(client) -> str | None:
    with client.post(
        "/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        catch_response=True,
        name="POST /auth/login [admin]",
    ) as resp:
        if resp.status_code == 200:
            return resp.json()["access_token"]
        resp.failure(f"Admin login failed: {resp.status_code} — {extract_error_detail(resp)}")
        return None


class BrowseCatalogJourney(SequentialTaskSet):
    """Home page -> Category -> Product detail -> Product by slug.

    Models a shopper clicking through the storefront in either language.
    Every product detail request bumps the product's view counter.
    """

    def on_start(self):
        self.state = BrowsingState()
        self.lang = random.choice(["vi", "vi", "zh"])

    @task
    def home_page(self):
        with self.client.get(
            "/products",
            params={"sort": random.choice(["newest", "-sold", "price-asc"]), "limit": 12, "lang": self.lang},
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code == 200:
                self.state.products = resp.json()["items"]
            else:
                resp.failure(f"Browse failed: {resp.status_code}")
                self.interrupt()

    @task
    def categories(self):
        self.client.get("/categories", params={"lang": self.lang}, name="GET /categories")

    @task
    def product_detail(self):
        if not self.state.products:
            self.interrupt()
        card = random.choice(self.state.products)
        self.state.product_id, self.state.slug = card["id"], card["slug"]
        with self.client.get(
            f"/products/{self.state.product_id}",
            params={"lang": self.lang},
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Product detail failed: {resp.status_code}")

    @task
    def product_by_slug(self):
        self.client.get(
            f"/products/slug/{self.state.slug}",
            params={"lang": self.lang},
            name="GET /products/slug/{slug}",
        )

    @task
    def done(self):
        self.interrupt()


class SearchJourney(SequentialTaskSet):
    """Type-ahead suggestions -> Full search.

    Search folds Vietnamese diacritics, so the generated terms are typed
    without accents the way most shoppers type them.
    """

    def on_start(self):
        self.term = search_term()

    @task
    def suggestions(self):
        self.client.get("/products/suggestions", params={"q": self.term[:3]}, name="GET /products/suggestions")

    @task
    def search(self):
        with self.client.get(
            "/products/search",
            params={"q": self.term},
            catch_response=True,
            name="GET /products/search",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Search failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class CatalogAdminJourney(SequentialTaskSet):
    """Admin login -> Create Category -> Create Product -> Update -> Delete both.

    Leaves the catalog as it found it.
    """

    def on_start(self):
        self.state = CatalogAdminState()

    @task
    def login(self):
        self.state.access_token = admin_login(self.client)
        if not self.state.access_token:
            self.interrupt()

    @task
    def create_category(self):
        with self.client.post(
            "/admin/categories",
            json=category_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /admin/categories",
        ) as resp:
            if resp.status_code == 201:
                self.state.category_id = resp.json()["category_id"]
            else:
                resp.failure(f"Create category failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def create_product(self):
        payload = {**product_data(), "category_ids": [self.state.category_id]}
        with self.client.post(
            "/admin/products",
            json=payload,
            headers=self.state.headers,
            catch_response=True,
            name="POST /admin/products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_id = resp.json()["product_id"]
            else:
                resp.failure(f"Create product failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def update_product(self):
        with self.client.put(
            f"/admin/products/{self.state.product_id}",
            json=product_update_data(),
            headers=self.state.headers,
            catch_response=True,
            name="PUT /admin/products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update product failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def delete_product(self):
        self.client.delete(
            f"/admin/products/{self.state.product_id}",
            headers=self.state.headers,
            name="DELETE /admin/products/{id}",
        )

    @task
    def delete_category(self):
        self.client.delete(
            f"/admin/categories/{self.state.category_id}",
            headers=self.state.headers,
            name="DELETE /admin/categories/{id}",
        )

    @task
    def done(self):
        self.interrupt()


class CatalogUser(HttpUser):
    """Locust user simulating catalog traffic.

    Weighted task distribution:
    - Browsing: most common
    - Search: frequent
    - Admin catalog edits: rare
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        BrowseCatalogJourney: 6,
        SearchJourney: 3,
        CatalogAdminJourney: 1,
    }
