"""Tests for the Product aggregate: invariants, stock and sold counters."""

import pytest
from protean.exceptions import ValidationError
from storefront.product.events import SoldCountAdjusted, StockRestored, StockWithdrawn
from storefront.product.product import Product

COLOR = {
    "name": {"vi": "Màu sắc", "zh": "颜色"},
    "options": [
        {"label": {"vi": "Đen", "zh": "黑色"}, "value": "den"},
        {"label": {"vi": "Trắng"}, "value": "trang"},
    ],
}


def _product(**overrides):
    defaults = {
        "slug": "ban-lam-viec",
        "sku": "BLV-001",
        "name_vi": "Bàn làm việc",
        "price_original": 2_000_000,
        "price_sale": 1_800_000,
        "quantity": 5,
        "attributes": [COLOR],
    }
    defaults.update(overrides)
    product = Product.create(**defaults)
    product._events.clear()
    return product


class TestProductInvariants:
    def test_slug_must_be_url_safe(self):
        with pytest.raises(ValidationError) as exc:
            _product(slug="Bàn Làm Việc")
        assert "slug" in exc.value.messages

    def test_sale_price_cannot_exceed_original(self):
        with pytest.raises(ValidationError) as exc:
            _product(price_sale=2_500_000)
        assert "price_sale" in exc.value.messages

    def test_attribute_options_need_a_value(self):
        broken = {"name": {"vi": "Chất liệu"}, "options": [{"label": {"vi": "Gỗ"}}]}
        with pytest.raises(ValidationError) as exc:
            _product(attributes=[broken])
        assert "attributes" in exc.value.messages

    def test_create_raises_event(self):
        product = Product.create(
            slug="ke-sach", sku="KS-1", name_vi="Kệ sách", price_original=500_000, price_sale=450_000, quantity=3
        )
        assert product._events[-1].__class__.__name__ == "ProductCreated"
        assert product.sold == 0
        assert product.views == 0


class TestStock:
    def test_withdraw_reduces_quantity(self):
        product = _product()
        product.withdraw_stock(2)

        assert product.quantity == 3
        assert isinstance(product._events[-1], StockWithdrawn)
        assert product._events[-1].remaining == 3

    def test_withdraw_more_than_available(self):
        product = _product(quantity=1)
        with pytest.raises(ValidationError) as exc:
            product.withdraw_stock(2)
        assert 'Product "Bàn làm việc" has only 1 left in stock' in str(exc.value)
        assert product.quantity == 1

    def test_restock(self):
        product = _product(quantity=0)
        product.restock(4)

        assert product.quantity == 4
        assert isinstance(product._events[-1], StockRestored)

    def test_restock_rejects_zero(self):
        with pytest.raises(ValidationError):
            _product().restock(0)


class TestSoldCounter:
    def test_record_and_reverse(self):
        product = _product()
        product.record_sale(3)
        product.reverse_sale(1)

        assert product.sold == 2
        assert all(isinstance(e, SoldCountAdjusted) for e in product._events)

    def test_reverse_never_goes_negative(self):
        product = _product()
        product.record_sale(1)
        product.reverse_sale(5)
        assert product.sold == 0

    def test_reset_to_same_value_is_silent(self):
        product = _product()
        product.reset_sold(0)
        assert product._events == []


class TestMultilingualViews:
    def test_resolve_attributes_by_value(self):
        product = _product()
        resolved = product.resolve_attributes({"Màu sắc": "den"})
        assert resolved == [{"name": {"vi": "Màu sắc", "zh": "颜色"}, "value": {"vi": "Đen", "zh": "黑色"}}]

    def test_resolve_attributes_by_label(self):
        product = _product()
        resolved = product.resolve_attributes({"Màu sắc": "Trắng"})
        assert resolved[0]["value"] == {"vi": "Trắng", "zh": ""}

    def test_unknown_attribute_kept_verbatim(self):
        resolved = _product().resolve_attributes({"Kích thước": "120cm"})
        assert resolved == [{"name": {"vi": "Kích thước", "zh": ""}, "value": {"vi": "120cm", "zh": "120cm"}}]

    def test_detail_in_chinese_falls_back_per_field(self):
        product = _product(name_zh="办公桌")
        detail = product.to_detail("zh")

        assert detail["name"] == "办公桌"
        assert detail["attributes"][0]["name"] == "颜色"
        assert detail["attributes"][0]["options"][1]["label"] == "Trắng"

    def test_apply_translation_records_parts(self):
        product = _product(description_vi="Mặt gỗ MDF")
        product.apply_translation("zh", name="办公桌", description="MDF 桌面")

        assert product.name.zh == "办公桌"
        assert product.description.zh == "MDF 桌面"
        assert product._events[-1].language == "zh"

    def test_update_details_without_changes_raises_nothing(self):
        product = _product()
        product.update_details(price_sale=1_800_000)
        assert product._events == []
