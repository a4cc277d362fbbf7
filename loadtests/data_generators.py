"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's Pydantic request
schemas and the domain's own rules (Vietnamese phone numbers, URL-safe
slugs, sale price never above the original price).
"""

import random
import uuid

from faker import Faker

fake = Faker("vi_VN")

FURNITURE_KINDS = ["Ghế văn phòng", "Bàn làm việc", "Tủ hồ sơ", "Kệ sách", "Sofa", "Bàn họp", "Giường ngủ"]
MATERIALS = ["gỗ sồi", "gỗ óc chó", "khung thép", "lưng lưới", "da PU", "mặt kính"]
COLOURS = [("Đen", "den"), ("Trắng", "trang"), ("Nâu", "nau"), ("Xám", "xam")]
SEARCH_TERMS = ["ghe", "ban", "tu ho so", "sofa", "ke sach", "van phong", "go soi"]


def short_id() -> str:
    return uuid.uuid4().hex[:8]


# ---------- Identity ----------


def valid_email() -> str:
    """Unique e-mail; the local part carries a random suffix so repeated runs never collide."""
    return f"lt.{fake.user_name()[:20]}.{short_id()}@example.com"


def valid_phone() -> str:
    """Vietnamese mobile number: a leading 0 followed by nine digits."""
    return "0" + random.choice("35789") + "".join(random.choices("0123456789", k=8))


def register_data() -> dict:
    return {
        "email": valid_email(),
        "name": fake.name()[:150],
        "password": f"matkhau-{short_id()}",
        "phone": valid_phone(),
    }


# ---------- Catalog ----------


def product_data(quantity: int | None = None) -> dict:
    """CreateProductRequest payload with one colour attribute."""
    kind = random.choice(FURNITURE_KINDS)
    material = random.choice(MATERIALS)
    suffix = short_id()
    original = random.randrange(500_000, 15_000_000, 10_000)
    sale = int(original * random.uniform(0.7, 1.0)) // 10_000 * 10_000
    colours = random.sample(COLOURS, k=2)
    return {
        "slug": f"lt-{suffix}",
        "sku": f"LT-{suffix.upper()}",
        "name_vi": f"{kind} {material} {suffix}",
        "description_vi": fake.paragraph(nb_sentences=3),
        "images": [f"https://cdn.example.com/loadtest/{suffix}.jpg"],
        "attributes": [
            {
                "name": {"vi": "Màu sắc"},
                "options": [
                    {"label": {"vi": label}, "value": value, "is_default": i == 0}
                    for i, (label, value) in enumerate(colours)
                ],
            }
        ],
        "price_original": original,
        "price_sale": sale,
        "quantity": quantity if quantity is not None else random.randint(50, 500),
        "hot": random.random() < 0.2,
        "on_sale": sale < original,
    }


def product_update_data() -> dict:
    original = random.randrange(500_000, 15_000_000, 10_000)
    return {
        "price_original": original,
        "price_sale": original,
        "quantity": random.randint(20, 200),
        "hot": random.random() < 0.5,
    }


def category_data() -> dict:
    suffix = short_id()
    return {
        "slug": f"lt-danh-muc-{suffix}",
        "name_vi": f"{random.choice(FURNITURE_KINDS)} {suffix}",
        "description": fake.sentence(),
    }


def search_term() -> str:
    return random.choice(SEARCH_TERMS)


# ---------- Orders ----------


def order_items(products: list[dict], max_lines: int = 2) -> list[dict]:
    """Pick a couple of in-stock product cards and turn them into order lines."""
    in_stock = [p for p in products if p.get("in_stock")]
    chosen = random.sample(in_stock, k=min(max_lines, len(in_stock)))
    return [
        {
            "product_id": product["id"],
            "quantity": random.randint(1, 2),
            "selected_attributes": {"Màu sắc": random.choice(COLOURS)[1]},
        }
        for product in chosen
    ]


def checkout_data(items: list[dict], payment_method: str = "cod", email: str | None = None) -> dict:
    """PlaceOrderRequest payload."""
    return {
        "customer_name": fake.name()[:255],
        "phone": valid_phone(),
        "email": email or valid_email(),
        "address": fake.street_address()[:400],
        "city": random.choice(["TP. Hồ Chí Minh", "Hà Nội", "Đà Nẵng", "Long An", "Cần Thơ"]),
        "payment_method": payment_method,
        "note": random.choice([None, "Giao giờ hành chính", "Gọi trước khi giao"]),
        "items": items,
    }


def cancel_reason() -> str:
    return random.choice(["Đổi ý", "Đặt nhầm màu", "Tìm được chỗ rẻ hơn"])
