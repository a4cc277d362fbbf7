"""Order read side — admin listing, per-user history and status counts."""

from datetime import datetime

from protean.utils.globals import current_domain

from shared.clock import as_naive_utc
from shared.queries import fetch_all
from storefront.order.order import Order, OrderStatus

_EPOCH = datetime(1970, 1, 1)

SORT_KEYS = {
    "created_at": lambda o: as_naive_utc(o.created_at) or _EPOCH,
    "total": lambda o: o.total or 0,
    "status": lambda o: o.status or "",
}


def list_orders(status=None, sort_by="created_at", order="desc", lang=None) -> list[dict]:
    orders = fetch_all(Order, status=status) if status else fetch_all(Order)
    orders.sort(key=SORT_KEYS.get(sort_by, SORT_KEYS["created_at"]), reverse=order != "asc")
    return [o.to_dict(lang) for o in orders]


def order_detail(order_id, lang=None) -> dict:
    return current_domain.repository_for(Order).get(order_id).to_dict(lang)


def orders_of(user_id, lang=None) -> list[dict]:
    orders = fetch_all(Order, user_id=str(user_id))
    orders.sort(key=SORT_KEYS["created_at"], reverse=True)
    return [o.to_dict(lang) for o in orders]


def order_stats() -> dict:
    orders = fetch_all(Order)
    stats = {status.value: 0 for status in OrderStatus}
    for order in orders:
        stats[order.status] = stats.get(order.status, 0) + 1
    stats["total"] = len(orders)
    return stats
