"""Integration tests for catalog endpoints (public browse and admin CRUD) via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.auth.tokens import create_access_token
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain
from storefront.api.routes import admin_router, category_router, product_router
from storefront.product.product import Product


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(admin_router)
    return TestClient(app)


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin-1', 'admin')}"}


@pytest.fixture()
def user_headers():
    return {"Authorization": f"Bearer {create_access_token('user-1', 'user')}"}


def _product_body(**overrides):
    body = {
        "slug": "ban-lam-viec-go",
        "sku": "BLV-001",
        "name_vi": "Bàn làm việc gỗ",
        "price_original": 3_200_000,
        "price_sale": 2_890_000,
        "quantity": 8,
        "images": ["https://cdn.example.com/ban.jpg"],
        "attributes": [
            {"name": {"vi": "Kích thước"}, "options": [{"label": {"vi": "1m2"}, "value": "120", "is_default": True}]}
        ],
    }
    body.update(overrides)
    return body


def _create(client, headers, **overrides):
    response = client.post("/admin/products", json=_product_body(**overrides), headers=headers)
    assert response.status_code == 201
    return response.json()["product_id"]


class TestAdminAccess:
    def test_requires_token(self, client):
        assert client.post("/admin/products", json=_product_body()).status_code == 401

    def test_requires_admin_role(self, client, user_headers):
        assert client.post("/admin/products", json=_product_body(), headers=user_headers).status_code == 403

    def test_rejects_forged_token(self, client):
        headers = {"Authorization": "Bearer not-a-jwt"}
        assert client.get("/admin/orders", headers=headers).status_code == 401


class TestAdminProductCrud:
    def test_create(self, client, admin_headers):
        product_id = _create(client, admin_headers)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.sku == "BLV-001"
        assert product.attribute_list[0]["name"] == {"vi": "Kích thước", "zh": ""}

    def test_duplicate_slug_is_400(self, client, admin_headers):
        _create(client, admin_headers)
        response = client.post("/admin/products", json=_product_body(sku="BLV-002"), headers=admin_headers)
        assert response.status_code == 400

    def test_sale_above_original_is_400(self, client, admin_headers):
        response = client.post(
            "/admin/products", json=_product_body(price_sale=4_000_000), headers=admin_headers
        )
        assert response.status_code == 400

    def test_update(self, client, admin_headers):
        product_id = _create(client, admin_headers)
        response = client.put(
            f"/admin/products/{product_id}", json={"price_sale": 2_500_000, "hot": True}, headers=admin_headers
        )

        assert response.status_code == 200
        product = current_domain.repository_for(Product).get(product_id)
        assert product.price_sale == 2_500_000
        assert product.hot is True

    def test_delete(self, client, admin_headers):
        product_id = _create(client, admin_headers)
        assert client.delete(f"/admin/products/{product_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/products/{product_id}").status_code == 404

    def test_category_lifecycle(self, client, admin_headers):
        response = client.post(
            "/admin/categories", json={"slug": "ban", "name_vi": "Bàn", "name_zh": "桌子"}, headers=admin_headers
        )
        assert response.status_code == 201
        category_id = response.json()["category_id"]

        listed = client.get("/categories", params={"lang": "zh"}).json()["items"]
        assert [c["name"] for c in listed] == ["桌子"]

        assert client.delete(f"/admin/categories/{category_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/categories/{category_id}").status_code == 404


class TestPublicCatalog:
    def test_browse(self, client, admin_headers):
        _create(client, admin_headers)
        page = client.get("/products").json()

        assert page["total"] == 1
        assert page["items"][0]["slug"] == "ban-lam-viec-go"

    def test_invalid_sort_is_422(self, client):
        assert client.get("/products", params={"sort": "random"}).status_code == 422

    def test_detail_counts_views(self, client, admin_headers):
        product_id = _create(client, admin_headers)
        client.get(f"/products/{product_id}")
        client.get(f"/products/{product_id}")

        assert current_domain.repository_for(Product).get(product_id).views == 2

    def test_by_slug(self, client, admin_headers):
        _create(client, admin_headers)
        detail = client.get("/products/slug/ban-lam-viec-go").json()
        assert detail["attributes"][0]["options"][0]["label"] == "1m2"

    def test_unknown_slug_is_404(self, client):
        assert client.get("/products/slug/khong-co").status_code == 404

    def test_search_ignores_diacritics(self, client, admin_headers):
        _create(client, admin_headers)
        items = client.get("/products/search", params={"q": "ban lam viec"}).json()["items"]
        assert [i["sku"] for i in items] == ["BLV-001"]


class TestCategoryTree:
    def _category(self, client, headers, slug, name_vi, **extra):
        response = client.post("/admin/categories", json={"slug": slug, "name_vi": name_vi, **extra}, headers=headers)
        assert response.status_code == 201
        return response.json()["category_id"]

    def test_public_tree_and_drag_and_drop(self, client, admin_headers):
        ghe = self._category(client, admin_headers, "ghe", "Ghế")
        ban = self._category(client, admin_headers, "ban", "Bàn")
        sofa = self._category(client, admin_headers, "ghe-sofa", "Ghế sofa", parent_id=ghe)

        tree = client.get("/categories/tree").json()
        assert [n["slug"] for n in tree] == ["ghe", "ban"]
        assert [n["slug"] for n in tree[0]["children"]] == ["ghe-sofa"]

        response = client.post(
            "/admin/categories/reorder",
            json={"dragged_id": sofa, "target_id": ban, "position": "before"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert [n["slug"] for n in client.get("/categories/tree").json()] == ["ghe", "ghe-sofa", "ban"]

    def test_inactive_categories_only_in_admin_tree(self, client, admin_headers):
        self._category(client, admin_headers, "ke", "Kệ", is_active=False)
        self._category(client, admin_headers, "tu", "Tủ")

        assert [n["slug"] for n in client.get("/categories/tree").json()] == ["tu"]
        assert [c["slug"] for c in client.get("/categories").json()["items"]] == ["tu"]
        admin_tree = client.get("/admin/categories/tree", headers=admin_headers).json()
        assert [n["slug"] for n in admin_tree] == ["ke", "tu"]

    def test_reorder_into_own_child_is_400(self, client, admin_headers):
        ghe = self._category(client, admin_headers, "ghe", "Ghế")
        sofa = self._category(client, admin_headers, "ghe-sofa", "Ghế sofa", parent_id=ghe)

        response = client.post(
            "/admin/categories/reorder",
            json={"dragged_id": ghe, "target_id": sofa, "position": "inside"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_reorder_requires_admin(self, client, user_headers):
        response = client.post(
            "/admin/categories/reorder",
            json={"dragged_id": "a", "target_id": "b", "position": "after"},
            headers=user_headers,
        )
        assert response.status_code == 403
