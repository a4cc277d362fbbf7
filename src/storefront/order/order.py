"""Order aggregate (CQRS) — a customer's purchase and its stock reservation.

Stock is withdrawn from products when the order is placed, so a Pending
order holds its units until ``reserved_until``. After that the reservation
sweep cancels it and the units go back on the shelf.

State Machine:
    Pending → Confirmed → Shipping → Completed
    Pending / Confirmed / Shipping → Cancelled

Completed and Cancelled are terminal. Every state change is guarded by the
transition map, which is what keeps stock and ``sold`` adjustments to a
single application per order.
"""

import json
import random
import time
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from shared.clock import as_naive_utc
from storefront.domain import storefront
from storefront.order.events import (
    MomoPaymentRecorded,
    OrderCancelled,
    OrderConfirmed,
    OrderDeleted,
    OrderPlaced,
    OrderStatusChanged,
    ShipmentAssigned,
)
from storefront.shared.localized import LocalizedText


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SHIPPING = "Shipping"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    def label(self, lang="vi"):
        labels = _STATUS_LABELS[self]
        return labels.get(lang) or labels["vi"]


_STATUS_LABELS = {
    OrderStatus.PENDING: {"vi": "Chờ xác nhận", "zh": "待确认"},
    OrderStatus.CONFIRMED: {"vi": "Đã xác nhận", "zh": "已确认"},
    OrderStatus.SHIPPING: {"vi": "Đang giao hàng", "zh": "配送中"},
    OrderStatus.COMPLETED: {"vi": "Hoàn thành", "zh": "已完成"},
    OrderStatus.CANCELLED: {"vi": "Đã hủy", "zh": "已取消"},
}


class PaymentMethod(Enum):
    COD = "cod"
    BANK = "bank"
    MOMO = "momo"

    @property
    def label(self):
        return {"cod": "COD", "momo": "MoMo", "bank": "Chuyển khoản"}[self.value]


class CancellationActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    SYSTEM = "System"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPING, OrderStatus.CANCELLED},
    OrderStatus.SHIPPING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Which states each actor may cancel from
_CANCELLABLE_BY = {
    CancellationActor.CUSTOMER: {OrderStatus.PENDING},
    CancellationActor.SYSTEM: {OrderStatus.PENDING},
    CancellationActor.ADMIN: {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.SHIPPING},
}

# States whose units are already counted in ``Product.sold``
SOLD_STATES = {OrderStatus.CONFIRMED, OrderStatus.SHIPPING, OrderStatus.COMPLETED}

TERMINAL_STATES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

AUTO_CANCEL_NOTE = "[Auto] Cancelled: reservation expired ({hours}h)"


def generate_order_code() -> str:
    """``DH`` + the last 8 digits of the epoch milliseconds + 3 random digits."""
    millis = str(int(time.time() * 1000))[-8:]
    return f"DH{millis}{random.randint(0, 999):03d}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerInfo:
    """Who receives the order. Captured at checkout and never updated."""

    name = String(required=True, max_length=255)
    phone = String(required=True, max_length=20)
    email = String(max_length=254)
    address = String(required=True, max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """One product in an order, with price and name frozen at checkout."""

    product_id = Identifier(required=True)
    name = ValueObject(LocalizedText, required=True)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    img_url = String(max_length=1000)
    selected_attributes = Text()  # JSON list of {name: {vi, zh}, value: {vi, zh}}

    @property
    def attribute_pairs(self) -> list[dict]:
        return json.loads(self.selected_attributes) if self.selected_attributes else []

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_code = String(required=True, max_length=20)
    user_id = Identifier()  # Null for guest checkout
    customer = ValueObject(CustomerInfo, required=True)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    items = HasMany(OrderLine)
    total = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    note = Text()
    reserved_until = DateTime()
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    cancelled_by = String(max_length=50)
    cancellation_reason = String(max_length=500)
    momo_trans_id = String(max_length=100)
    momo_result_code = Integer()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_code,
        customer,
        lines,
        payment_method=PaymentMethod.COD.value,
        user_id=None,
        note=None,
        reservation_hours=24,
    ):
        """Create a Pending order.

        Args:
            order_code: Unique human-facing code, see ``generate_order_code``.
            customer: Dict with name, phone, email, address.
            lines: List of dicts with product_id, name (``{vi, zh}``), price,
                   quantity, img_url, selected_attributes (list of pairs).
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_code=order_code,
            user_id=user_id,
            customer=CustomerInfo(**customer),
            payment_method=payment_method,
            status=OrderStatus.PENDING.value,
            note=note,
            reserved_until=now + timedelta(hours=reservation_hours),
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(
                OrderLine(
                    product_id=line["product_id"],
                    name=LocalizedText(**line["name"]),
                    price=line["price"],
                    quantity=line["quantity"],
                    img_url=line.get("img_url"),
                    selected_attributes=json.dumps(line.get("selected_attributes") or [], ensure_ascii=False),
                )
            )
        order.total = sum(item.subtotal for item in order.items)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_code=order.order_code,
                user_id=str(user_id) if user_id else None,
                customer_name=order.customer.name,
                customer_email=order.customer.email,
                customer_phone=order.customer.phone,
                payment_method=order.payment_method,
                items=json.dumps(
                    [
                        {
                            "product_id": str(i.product_id),
                            "name": i.name.vi,
                            "price": i.price,
                            "quantity": i.quantity,
                        }
                        for i in order.items
                    ],
                    ensure_ascii=False,
                ),
                total=order.total,
                reserved_until=order.reserved_until,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def quantities(self) -> list[tuple[str, int]]:
        """``(product_id, quantity)`` for every line."""
        return [(str(i.product_id), i.quantity) for i in self.items]

    def is_owned_by(self, user_id) -> bool:
        return self.user_id is not None and str(self.user_id) == str(user_id)

    def reservation_expired(self, as_of) -> bool:
        if self.current_status != OrderStatus.PENDING or self.reserved_until is None:
            return False
        return as_naive_utc(self.reserved_until) < as_naive_utc(as_of)

    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = self.current_status
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _move_to(self, target_status):
        previous = self.current_status
        now = datetime.now(UTC)
        self.status = target_status.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_code=self.order_code,
                previous_status=previous.value,
                new_status=target_status.value,
                customer_email=self.customer.email,
                changed_at=now,
            )
        )
        return now

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def confirm(self, via="admin"):
        """Pending → Confirmed. The caller records the sale on each product."""
        self._assert_can_transition(OrderStatus.CONFIRMED)
        now = self._move_to(OrderStatus.CONFIRMED)
        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                order_code=self.order_code,
                total=self.total,
                confirmed_via=via,
                confirmed_at=now,
            )
        )

    def ship(self):
        self._assert_can_transition(OrderStatus.SHIPPING)
        self._move_to(OrderStatus.SHIPPING)

    def complete(self):
        self._assert_can_transition(OrderStatus.COMPLETED)
        self._move_to(OrderStatus.COMPLETED)

    def cancel(self, actor, reason=None):
        """Move to Cancelled and return the status the order was in.

        The caller restores stock for every line, and reverses the sale when
        the returned status is Confirmed or Shipping.
        """
        actor = CancellationActor(actor)
        previous = self.current_status
        self._assert_can_transition(OrderStatus.CANCELLED)
        if previous not in _CANCELLABLE_BY[actor]:
            allowed = ", ".join(sorted(s.value for s in _CANCELLABLE_BY[actor]))
            raise ValidationError({"status": [f"{actor.value} can only cancel orders in {allowed} state"]})

        now = self._move_to(OrderStatus.CANCELLED)
        self.cancelled_by = actor.value
        self.cancellation_reason = reason
        if actor == CancellationActor.SYSTEM and reason:
            self.note = f"{self.note}\n{reason}" if self.note else reason

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_code=self.order_code,
                previous_status=previous.value,
                cancelled_by=actor.value,
                reason=reason,
                customer_email=self.customer.email,
                total=self.total,
                cancelled_at=now,
            )
        )
        return previous

    def assign_shipment(self, carrier, tracking_number):
        if self.current_status not in (OrderStatus.CONFIRMED, OrderStatus.SHIPPING):
            raise ValidationError({"status": ["Shipment can only be assigned to Confirmed or Shipping orders"]})

        self.carrier = carrier
        self.tracking_number = tracking_number
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ShipmentAssigned(
                order_id=str(self.id),
                carrier=carrier,
                tracking_number=tracking_number,
            )
        )

    def record_momo_result(self, result_code, trans_id=None, message=None):
        self.momo_result_code = result_code
        self.momo_trans_id = trans_id
        self.updated_at = datetime.now(UTC)
        self.raise_(
            MomoPaymentRecorded(
                order_id=str(self.id),
                order_code=self.order_code,
                result_code=result_code,
                trans_id=trans_id,
                message=message,
                succeeded=result_code == 0,
            )
        )

    def mark_deleted(self):
        if self.current_status not in TERMINAL_STATES:
            raise ValidationError({"status": ["Only Completed or Cancelled orders can be deleted"]})
        self.raise_(OrderDeleted(order_id=str(self.id), order_code=self.order_code, status=self.status))

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    def to_dict(self, lang=None) -> dict:
        return {
            "id": str(self.id),
            "order_code": self.order_code,
            "user_id": str(self.user_id) if self.user_id else None,
            "customer": {
                "name": self.customer.name,
                "phone": self.customer.phone,
                "email": self.customer.email,
                "address": self.customer.address,
            },
            "payment_method": self.payment_method,
            "status": self.status,
            "total": self.total,
            "note": self.note,
            "reserved_until": self.reserved_until.isoformat() if self.reserved_until else None,
            "carrier": self.carrier,
            "tracking_number": self.tracking_number,
            "cancelled_by": self.cancelled_by,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "items": [
                {
                    "id": str(i.id),
                    "product_id": str(i.product_id),
                    "name": i.name.in_language(lang),
                    "price": i.price,
                    "quantity": i.quantity,
                    "img_url": i.img_url,
                    "selected_attributes": i.attribute_pairs,
                }
                for i in self.items
            ],
        }
