"""Ordering load test scenarios.

Stateful SequentialTaskSet journeys covering guest checkout with order
tracking, a signed-in shopper's cart-to-checkout flow, a cancellation
that puts stock back on the shelf, and the admin side of the order
lifecycle. Steps execute in order — each depends on the previous step
succeeding.

Every placed order withdraws stock, so long runs drain the catalog;
``CatalogAdminJourney`` and the expiry sweep put some of it back.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cancel_reason, checkout_data, order_items, register_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import AccountState, BrowsingState, CatalogAdminState, OrderState
from loadtests.scenarios.catalog import admin_login


def load_products(client, state: BrowsingState) -> bool:
    with client.get(
        "/products",
        params={"sort": "-sold", "limit": 24},
        catch_response=True,
        name="GET /products",
    ) as resp:
        if resp.status_code != 200:
            resp.failure(f"Browse failed: {resp.status_code}")
            return False
        state.products = resp.json()["items"]
    return any(p.get("in_stock") for p in state.products)


def place_order(client, order: OrderState, payload: dict, headers=None, path="/orders") -> bool:
    with client.post(
        path,
        json=payload,
        headers=headers or {},
        catch_response=True,
        name=f"POST {path}",
    ) as resp:
        if resp.status_code == 201:
            body = resp.json()
            order.order_id, order.order_code, order.total = body["order_id"], body["order_code"], body["total"]
            return True
        resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")
        return False


class GuestCheckoutJourney(SequentialTaskSet):
    """Browse -> Place COD order as guest -> Track order by code.

    The most common purchase path: no account, cash on delivery.
    """

    def on_start(self):
        self.browsing = BrowsingState()
        self.order = OrderState()

    @task
    def browse(self):
        if not load_products(self.client, self.browsing):
            self.interrupt()

    @task
    def checkout(self):
        self.order.items = order_items(self.browsing.products)
        payload = checkout_data(self.order.items, payment_method=random.choice(["cod", "cod", "bank"]))
        if not place_order(self.client, self.order, payload):
            self.interrupt()

    @task
    def track(self):
        with self.client.get(
            f"/orders/track/{self.order.order_code}",
            params={"lang": random.choice(["vi", "zh"])},
            catch_response=True,
            name="GET /orders/track/{code}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Tracking failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class MemberCheckoutJourney(SequentialTaskSet):
    """Register -> Login -> Add to Cart -> Update Cart -> Checkout -> My Orders.

    A COD checkout clears the shopper's cart.
    """

    def on_start(self):
        self.account = AccountState()
        self.browsing = BrowsingState()
        self.order = OrderState()

    @task
    def register_and_login(self):
        payload = register_data()
        resp = self.client.post("/auth/register", json=payload, name="POST /auth/register")
        if resp.status_code != 201:
            self.interrupt()
        resp = self.client.post(
            "/auth/login", json={"email": payload["email"], "password": payload["password"]}, name="POST /auth/login"
        )
        if resp.status_code != 200:
            self.interrupt()
        self.account.email = payload["email"]
        self.account.access_token = resp.json()["access_token"]

    @task
    def fill_cart(self):
        if not load_products(self.client, self.browsing):
            self.interrupt()
        self.order.items = order_items(self.browsing.products)
        for item in self.order.items:
            with self.client.post(
                "/cart/items",
                json={"product_id": item["product_id"], "quantity": item["quantity"]},
                headers=self.account.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.account.headers, name="GET /cart")

    @task
    def checkout(self):
        payload = checkout_data(self.order.items, email=self.account.email)
        if not place_order(self.client, self.order, payload, headers=self.account.headers):
            self.interrupt()

    @task
    def my_orders(self):
        with self.client.get(
            "/orders/mine", headers=self.account.headers, catch_response=True, name="GET /orders/mine"
        ) as resp:
            if resp.status_code == 200 and not any(o["id"] == self.order.order_id for o in resp.json()["items"]):
                resp.failure("Placed order missing from order history")

    @task
    def done(self):
        self.interrupt()


class CancelOrderJourney(SequentialTaskSet):
    """Register -> Checkout -> Cancel own pending order.

    Cancelling a Pending order returns the withdrawn stock.
    """

    def on_start(self):
        self.account = AccountState()
        self.browsing = BrowsingState()
        self.order = OrderState()

    @task
    def sign_up(self):
        payload = register_data()
        self.client.post("/auth/register", json=payload, name="POST /auth/register")
        resp = self.client.post(
            "/auth/login", json={"email": payload["email"], "password": payload["password"]}, name="POST /auth/login"
        )
        if resp.status_code != 200:
            self.interrupt()
        self.account.access_token = resp.json()["access_token"]

    @task
    def checkout(self):
        if not load_products(self.client, self.browsing):
            self.interrupt()
        payload = checkout_data(order_items(self.browsing.products, max_lines=1))
        if not place_order(self.client, self.order, payload, headers=self.account.headers):
            self.interrupt()

    @task
    def cancel(self):
        with self.client.post(
            f"/orders/{self.order.order_id}/cancel",
            json={"reason": cancel_reason()},
            headers=self.account.headers,
            catch_response=True,
            name="POST /orders/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.order.current_status = resp.json()["status"]
            else:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderFulfilmentJourney(SequentialTaskSet):
    """Guest checkout -> Admin: Confirm -> Assign shipment -> Shipping -> Completed.

    Confirming counts the units as sold; the daily sales projection and
    the dashboard move with every step.
    """

    def on_start(self):
        self.admin = CatalogAdminState()
        self.browsing = BrowsingState()
        self.order = OrderState()

    @task
    def checkout(self):
        if not load_products(self.client, self.browsing):
            self.interrupt()
        if not place_order(self.client, self.order, checkout_data(order_items(self.browsing.products))):
            self.interrupt()

    @task
    def admin_sign_in(self):
        self.admin.access_token = admin_login(self.client)
        if not self.admin.access_token:
            self.interrupt()

    def _move(self, status):
        with self.client.put(
            f"/admin/orders/{self.order.order_id}/status",
            json={"status": status},
            headers=self.admin.headers,
            catch_response=True,
            name="PUT /admin/orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.order.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def confirm(self):
        self._move("Confirmed")

    @task
    def assign_shipment(self):
        self.client.put(
            f"/admin/orders/{self.order.order_id}/shipment",
            json={"carrier": random.choice(["GHN", "GHTK", "Viettel Post"]), "tracking_number": self.order.order_code},
            headers=self.admin.headers,
            name="PUT /admin/orders/{id}/shipment",
        )

    @task
    def ship(self):
        self._move("Shipping")

    @task
    def complete(self):
        self._move("Completed")

    @task
    def dashboard(self):
        self.client.get("/admin/dashboard", headers=self.admin.headers, name="GET /admin/dashboard")

    @task
    def done(self):
        self.interrupt()


class OrderingUser(HttpUser):
    """Locust user simulating purchase traffic.

    Weighted task distribution:
    - Guest checkout: most common
    - Member checkout: frequent
    - Cancellation: occasional
    - Admin fulfilment: occasional
    """

    wait_time = between(1.0, 3.0)
    tasks = {
        GuestCheckoutJourney: 5,
        MemberCheckoutJourney: 3,
        CancelOrderJourney: 1,
        OrderFulfilmentJourney: 2,
    }
