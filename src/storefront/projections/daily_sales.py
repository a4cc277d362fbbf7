"""Daily sales projection — dashboard figures per calendar day.

Keyed by date (YYYY-MM-DD). Revenue is counted when an order is confirmed;
cancelling a confirmed order books the amount as cancelled revenue on the
day of the cancellation.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from shared.queries import fetch_all
from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderConfirmed, OrderPlaced
from storefront.order.order import Order

_SALE_COUNTED = ("Confirmed", "Shipping")


@storefront.projection
class DailySales:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    orders_confirmed = Integer(default=0)
    orders_cancelled = Integer(default=0)
    confirmed_revenue = Float(default=0.0)
    cancelled_revenue = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailySales)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailySales(
            date=date_key,
            orders_placed=0,
            orders_confirmed=0,
            orders_cancelled=0,
            confirmed_revenue=0.0,
            cancelled_revenue=0.0,
        )


@storefront.projector(projector_for=DailySales, aggregates=[Order])
class DailySalesProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        current_domain.repository_for(DailySales).add(record)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        record = _get_or_create(event.confirmed_at.date().isoformat())
        record.orders_confirmed = (record.orders_confirmed or 0) + 1
        record.confirmed_revenue = (record.confirmed_revenue or 0.0) + (event.total or 0.0)
        current_domain.repository_for(DailySales).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.cancelled_at.date().isoformat())
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        if event.previous_status in _SALE_COUNTED:
            record.cancelled_revenue = (record.cancelled_revenue or 0.0) + (event.total or 0.0)
        current_domain.repository_for(DailySales).add(record)


def recent_days(days=30) -> list[dict]:
    records = sorted(fetch_all(DailySales), key=lambda r: r.date, reverse=True)[:days]
    return [
        {
            "date": r.date,
            "orders_placed": r.orders_placed or 0,
            "orders_confirmed": r.orders_confirmed or 0,
            "orders_cancelled": r.orders_cancelled or 0,
            "confirmed_revenue": r.confirmed_revenue or 0.0,
            "cancelled_revenue": r.cancelled_revenue or 0.0,
            "net_revenue": (r.confirmed_revenue or 0.0) - (r.cancelled_revenue or 0.0),
        }
        for r in records
    ]
