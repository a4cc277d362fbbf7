"""Integration tests for cart, checkout, tracking and the MoMo webhook via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.auth.tokens import create_access_token
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain
from storefront.api.routes import admin_router, cart_router, momo_router, order_router
from storefront.order.order import Order, OrderStatus
from storefront.product.product import Product


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(momo_router)
    app.include_router(admin_router)
    return TestClient(app)


def _headers(user_id="user-1", role="user"):
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


def _checkout(product_id, quantity=1, **overrides):
    body = {
        "customer_name": "Lê Thị Hoa",
        "phone": "0987654321",
        "email": "hoa.le@example.com",
        "address": "45 Lê Lợi",
        "city": "Đà Nẵng",
        "items": [{"product_id": product_id, "quantity": quantity}],
    }
    body.update(overrides)
    return body


def _webhook(order_code, result_code=0, signature="test-signature"):
    return {
        "partnerCode": "MOMO",
        "orderId": order_code,
        "requestId": f"{order_code}-1",
        "amount": 1590000,
        "transId": 4088878653,
        "resultCode": result_code,
        "message": "Successful." if result_code == 0 else "Giao dịch bị từ chối",
        "signature": signature,
    }


class TestCartEndpoints:
    def test_cart_requires_login(self, client):
        assert client.get("/cart").status_code == 401

    def test_add_update_remove(self, client, create_product):
        product_id = create_product()
        headers = _headers()

        assert client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=headers).status_code == 201
        cart = client.get("/cart", headers=headers).json()
        assert cart["items"][0]["quantity"] == 2
        assert cart["total"] == 2 * 1_590_000

        client.put(f"/cart/items/{product_id}", json={"quantity": 3}, headers=headers)
        assert client.get("/cart", headers=headers).json()["items"][0]["quantity"] == 3

        client.delete(f"/cart/items/{product_id}", headers=headers)
        assert client.get("/cart", headers=headers).json()["items"] == []

    def test_over_stock_is_400(self, client, create_product):
        product_id = create_product(quantity=1)
        response = client.post("/cart/items", json={"product_id": product_id, "quantity": 5}, headers=_headers())
        assert response.status_code == 400


class TestCheckout:
    def test_guest_cod_order(self, client, create_product):
        product_id = create_product()
        response = client.post("/orders", json=_checkout(product_id, 2))

        assert response.status_code == 201
        data = response.json()
        assert data["order_code"].startswith("DH")
        assert data["total"] == 2 * 1_590_000
        assert current_domain.repository_for(Product).get(product_id).quantity == 8

    def test_signed_in_order_clears_cart(self, client, create_product):
        product_id = create_product()
        headers = _headers()
        client.post("/cart/items", json={"product_id": product_id}, headers=headers)

        client.post("/orders", json=_checkout(product_id), headers=headers)

        assert client.get("/cart", headers=headers).json()["items"] == []
        assert len(client.get("/orders/mine", headers=headers).json()["items"]) == 1

    def test_out_of_stock_is_400(self, client, create_product):
        product_id = create_product(quantity=1)
        assert client.post("/orders", json=_checkout(product_id, 3)).status_code == 400

    def test_empty_items_is_422(self, client):
        assert client.post("/orders", json={**_checkout("x"), "items": []}).status_code == 422

    def test_momo_checkout_returns_pay_url(self, client, create_product, gateway):
        response = client.post("/orders/momo", json=_checkout(create_product()))

        assert response.status_code == 201
        data = response.json()
        assert data["pay_url"].startswith("https://test-payment.momo.vn/pay/")
        assert gateway.calls[0]["order_code"] == data["order_code"]
        assert gateway.calls[0]["amount"] == 1_590_000

    def test_momo_gateway_down_is_502(self, client, create_product, gateway):
        gateway.configure(False)
        response = client.post("/orders/momo", json=_checkout(create_product()))

        assert response.status_code == 502
        order_code = response.json()["detail"]["order_code"]
        # The order still holds its reservation
        assert client.get(f"/orders/track/{order_code}").json()["status_key"] == "Pending"


class TestTracking:
    def test_track_in_chinese(self, client, create_product):
        code = client.post("/orders", json=_checkout(create_product(name_zh="办公椅"))).json()["order_code"]

        tracked = client.get(f"/orders/track/{code}", params={"lang": "zh"}).json()
        assert tracked["status"] == "待确认"
        assert tracked["items"][0]["name"] == "办公椅"
        assert tracked["address"] == "45 Lê Lợi, Đà Nẵng"

    def test_unknown_code_is_404(self, client):
        assert client.get("/orders/track/DH00000000000").status_code == 404


class TestMyOrders:
    def test_other_users_order_is_403(self, client, create_product):
        order_id = client.post("/orders", json=_checkout(create_product()), headers=_headers("user-1")).json()["order_id"]

        assert client.get(f"/orders/mine/{order_id}", headers=_headers("user-1")).status_code == 200
        assert client.get(f"/orders/mine/{order_id}", headers=_headers("user-2")).status_code == 403

    def test_customer_cancels_pending_order(self, client, create_product):
        product_id = create_product()
        order_id = client.post("/orders", json=_checkout(product_id), headers=_headers()).json()["order_id"]

        response = client.post(f"/orders/{order_id}/cancel", json={"reason": "Đặt nhầm"}, headers=_headers())

        assert response.json() == {"status": "Cancelled"}
        assert current_domain.repository_for(Product).get(product_id).quantity == 10

    def test_customer_cannot_cancel_confirmed_order(self, client, create_product):
        order_id = client.post("/orders", json=_checkout(create_product()), headers=_headers()).json()["order_id"]
        client.put(
            f"/admin/orders/{order_id}/status", json={"status": "Confirmed"}, headers=_headers("admin-1", "admin")
        )

        assert client.post(f"/orders/{order_id}/cancel", headers=_headers()).status_code == 400


class TestMomoWebhook:
    def test_success_confirms_order(self, client, create_product):
        product_id = create_product()
        code = client.post("/orders/momo", json=_checkout(product_id)).json()["order_code"]

        response = client.post("/momo/webhook", json=_webhook(code))

        assert response.json() == {"status": "Confirmed"}
        assert current_domain.repository_for(Product).get(product_id).sold == 1

    def test_bad_signature_is_401(self, client, create_product):
        code = client.post("/orders/momo", json=_checkout(create_product())).json()["order_code"]
        assert client.post("/momo/webhook", json=_webhook(code, signature="forged")).status_code == 401

    def test_failed_payment_keeps_order_pending(self, client, create_product):
        code = client.post("/orders/momo", json=_checkout(create_product())).json()["order_code"]

        assert client.post("/momo/webhook", json=_webhook(code, result_code=1006)).json() == {"status": "Pending"}


class TestAdminOrders:
    def test_status_flow_and_stats(self, client, create_product):
        admin = _headers("admin-1", "admin")
        order_id = client.post("/orders", json=_checkout(create_product())).json()["order_id"]

        for status in ("Confirmed", "Shipping", "Completed"):
            assert client.put(f"/admin/orders/{order_id}/status", json={"status": status}, headers=admin).status_code == 200

        stats = client.get("/admin/orders/stats", headers=admin).json()
        assert stats["Completed"] == 1
        assert current_domain.repository_for(Order).get(order_id).current_status == OrderStatus.COMPLETED

    def test_delete_requires_terminal_state(self, client, create_product):
        admin = _headers("admin-1", "admin")
        order_id = client.post("/orders", json=_checkout(create_product())).json()["order_id"]

        assert client.delete(f"/admin/orders/{order_id}", headers=admin).status_code == 400
        client.put(f"/admin/orders/{order_id}/status", json={"status": "Cancelled"}, headers=admin)
        assert client.delete(f"/admin/orders/{order_id}", headers=admin).status_code == 200

    def test_dashboard(self, client, create_product):
        admin = _headers("admin-1", "admin")
        order_id = client.post("/orders", json=_checkout(create_product())).json()["order_id"]
        client.put(f"/admin/orders/{order_id}/status", json={"status": "Confirmed"}, headers=admin)

        dashboard = client.get("/admin/dashboard", headers=admin).json()
        assert dashboard["daily_sales"][0]["orders_confirmed"] == 1
        assert dashboard["top_products"][0]["sold"] == 1
