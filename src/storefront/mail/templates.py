"""Order e-mail templates. Customers get Vietnamese copy; the shop admin gets a short summary."""

import json

from storefront.order.order import OrderStatus
from storefront.shared.localized import format_vnd

SIGNATURE = "\n\nCảm ơn bạn đã mua sắm tại Nội Thất Đại Dũng Phát!"


def _item_lines(items_json) -> str:
    items = json.loads(items_json) if items_json else []
    return "\n".join(f"- {i['name']} x{i['quantity']}: {format_vnd(i['price'] * i['quantity'])}" for i in items)


def order_confirmation(event) -> dict:
    return {
        "subject": f"Xác nhận đơn hàng #{event.order_code}",
        "body": (
            f"Xin chào {event.customer_name},\n\n"
            f"Chúng tôi đã nhận được đơn hàng #{event.order_code} của bạn.\n\n"
            f"{_item_lines(event.items)}\n\n"
            f"Tổng cộng: {format_vnd(event.total)}\n"
            f"Bạn có thể tra cứu đơn hàng bằng mã {event.order_code}." + SIGNATURE
        ),
    }


def new_order_alert(event) -> dict:
    return {
        "subject": f"🛒 ĐƠN HÀNG MỚI #{event.order_code} - {format_vnd(event.total)}",
        "body": (
            f"Khách hàng: {event.customer_name} ({event.customer_phone})\n"
            f"Thanh toán: {event.payment_method}\n\n"
            f"{_item_lines(event.items)}\n\n"
            f"Tổng cộng: {format_vnd(event.total)}"
        ),
    }


def status_update(event) -> dict:
    label = OrderStatus(event.new_status).label("vi")
    return {
        "subject": f"Đơn hàng #{event.order_code}: {label}",
        "body": f"Đơn hàng #{event.order_code} của bạn đã chuyển sang trạng thái: {label}." + SIGNATURE,
    }


def cancellation(event) -> dict:
    reason = f"\nLý do: {event.reason}" if event.reason else ""
    return {
        "subject": f"Đơn hàng #{event.order_code} đã bị hủy",
        "body": f"Đơn hàng #{event.order_code} trị giá {format_vnd(event.total)} đã bị hủy.{reason}" + SIGNATURE,
    }
