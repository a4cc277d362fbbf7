"""Order e-mails sent in reaction to order events."""

from protean.utils.globals import current_domain
from storefront.order.cancellation import CancelOrder
from storefront.order.status import ChangeOrderStatus


def _subjects(mailer, to):
    return [mail["subject"] for mail in mailer.sent_emails if mail["to"] == to]


class TestPlacementMails:
    def test_customer_and_shop_are_mailed(self, create_product, place_order, mailer):
        placed = place_order([{"product_id": create_product(), "quantity": 2}])

        assert _subjects(mailer, "minh.tran@example.com") == [f"Xác nhận đơn hàng #{placed['order_code']}"]
        admin = _subjects(mailer, "admin@furnishop.local")
        assert len(admin) == 1
        assert admin[0].startswith(f"🛒 ĐƠN HÀNG MỚI #{placed['order_code']}")

    def test_confirmation_lists_items_and_total(self, create_product, place_order, mailer):
        place_order([{"product_id": create_product(), "quantity": 2}])

        body = mailer.sent_emails[0]["body"]
        assert "- Ghế văn phòng x2: 3.180.000 ₫" in body
        assert "Tổng cộng: 3.180.000 ₫" in body

    def test_no_email_only_alerts_shop(self, create_product, place_order, mailer):
        place_order([{"product_id": create_product(), "quantity": 1}], email=None)

        assert [mail["to"] for mail in mailer.sent_emails] == ["admin@furnishop.local"]

    def test_delivery_failure_does_not_block_order(self, create_product, place_order, mailer, load):
        from storefront.order.order import Order

        mailer.configure(should_succeed=False)
        placed = place_order([{"product_id": create_product(), "quantity": 1}])

        assert load(Order, placed["order_id"]).order_code == placed["order_code"]
        assert mailer.sent_emails == []


class TestLifecycleMails:
    def test_status_update_mail(self, create_product, place_order, mailer):
        placed = place_order([{"product_id": create_product(), "quantity": 1}])
        mailer.reset()

        current_domain.process(ChangeOrderStatus(order_id=placed["order_id"], status="Confirmed"), asynchronous=False)

        assert _subjects(mailer, "minh.tran@example.com") == [f"Đơn hàng #{placed['order_code']}: Đã xác nhận"]

    def test_cancellation_sends_single_mail(self, create_product, place_order, mailer):
        placed = place_order([{"product_id": create_product(), "quantity": 1}])
        mailer.reset()

        current_domain.process(
            CancelOrder(order_id=placed["order_id"], actor="Admin", reason="Hết hàng"), asynchronous=False
        )

        assert len(mailer.sent_emails) == 1
        mail = mailer.sent_emails[0]
        assert mail["subject"] == f"Đơn hàng #{placed['order_code']} đã bị hủy"
        assert "Lý do: Hết hàng" in mail["body"]
