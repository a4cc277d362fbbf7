import json

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def fake_adapters():
    """Swap every outbound adapter for its in-memory fake."""
    from storefront.gateway import reset_gateway, set_gateway
    from storefront.gateway.fake_adapter import FakeWalletGateway
    from storefront.mail import reset_mailer, set_mailer
    from storefront.mail.fake_email import FakeEmailAdapter
    from storefront.translation.translator import FakeTranslator, reset_translator, set_translator

    adapters = {
        "gateway": FakeWalletGateway(),
        "mailer": FakeEmailAdapter(),
        "translator": FakeTranslator(),
    }
    set_gateway(adapters["gateway"])
    set_mailer(adapters["mailer"])
    set_translator(adapters["translator"])

    yield adapters

    reset_gateway()
    reset_mailer()
    reset_translator()


@pytest.fixture()
def mailer(fake_adapters):
    return fake_adapters["mailer"]


@pytest.fixture()
def gateway(fake_adapters):
    return fake_adapters["gateway"]


@pytest.fixture()
def translator(fake_adapters):
    return fake_adapters["translator"]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
COLOR_ATTRIBUTE = {
    "name": {"vi": "Màu sắc", "zh": "颜色"},
    "options": [
        {"label": {"vi": "Đen", "zh": "黑色"}, "value": "den", "is_default": True},
        {"label": {"vi": "Trắng", "zh": ""}, "value": "trang"},
    ],
}


@pytest.fixture()
def create_product():
    """Create a product through its command and return its id."""
    from storefront.product.management import CreateProduct

    def _create(**overrides):
        defaults = {
            "slug": "ghe-van-phong",
            "sku": "GVP-001",
            "name_vi": "Ghế văn phòng",
            "price_original": 1_850_000,
            "price_sale": 1_590_000,
            "quantity": 10,
            "images": json.dumps(["https://cdn.example.com/ghe.jpg"]),
            "attributes": json.dumps([COLOR_ATTRIBUTE], ensure_ascii=False),
        }
        defaults.update(overrides)
        return current_domain.process(CreateProduct(**defaults), asynchronous=False)

    return _create


@pytest.fixture()
def place_order():
    """Place an order for ``items`` and return ``{order_id, order_code, total}``."""
    from storefront.order.placement import PlaceOrder

    def _place(items, **overrides):
        defaults = {
            "customer_name": "Trần Văn Minh",
            "phone": "0912345678",
            "email": "minh.tran@example.com",
            "address": "12 Nguyễn Huệ",
            "city": "TP. Hồ Chí Minh",
            "payment_method": "cod",
            "items": json.dumps(items, ensure_ascii=False),
        }
        defaults.update(overrides)
        return current_domain.process(PlaceOrder(**defaults), asynchronous=False)

    return _place


@pytest.fixture()
def load():
    """``load(Model, id)`` fetches an aggregate from its repository."""

    def _load(model, identifier):
        return current_domain.repository_for(model).get(identifier)

    return _load
