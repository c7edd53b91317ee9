# shopfront/services/order_status.py
"""
Order status transitions allowed from the admin back-office.

The backend is the authority; this table only decides which actions are
offered and refuses anything else before a request is sent.
"""
from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from ..errors import IllegalTransition


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPING = "SHIPPING"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTE = "DISPUTE"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    PENDING_REFUND = "PENDING_REFUND"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    COD = "COD"
    VNPAY = "VNPAY"
    MOMO = "MOMO"


class Transition(NamedTuple):
    target: OrderStatus
    label: str
    side_effect: str | None
    requires_tracking: bool = False

    def as_api(self):
        return {
            "target": self.target.value,
            "label": self.label,
            "side_effect": self.side_effect,
            "requires_tracking": self.requires_tracking,
        }


S = OrderStatus

TRANSITIONS: dict[OrderStatus, tuple[Transition, ...]] = {
    S.PENDING: (
        Transition(S.CONFIRMED, "Confirm", None),
        Transition(S.CANCELLED, "Cancel", "restock reserved inventory"),
    ),
    S.CONFIRMED: (
        Transition(S.SHIPPING, "Ship", "assign tracking code", requires_tracking=True),
        Transition(S.PENDING, "Undo confirmation", None),
        Transition(S.CANCELLED, "Cancel", "restock reserved inventory"),
    ),
    S.SHIPPING: (
        Transition(S.DELIVERED, "Mark delivered", "mark COD payment as paid"),
        Transition(S.CANCELLED, "Delivery failed", "restock reserved inventory"),
    ),
    S.DELIVERED: (
        Transition(S.COMPLETED, "Complete", None),
        Transition(S.CANCELLED, "Return / refund", "start refund and return flow"),
    ),
    S.DISPUTE: (
        Transition(S.DELIVERED, "Resolve: delivered", None),
        Transition(S.CANCELLED, "Resolve: refund", "refund the customer"),
    ),
    S.COMPLETED: (),
    S.CANCELLED: (),
}

TERMINAL = frozenset(s for s, moves in TRANSITIONS.items() if not moves)


def _status(value) -> OrderStatus:
    return value if isinstance(value, OrderStatus) else OrderStatus(str(value).upper())


def available_actions(status) -> tuple[Transition, ...]:
    return TRANSITIONS[_status(status)]


def allowed_targets(status) -> tuple[OrderStatus, ...]:
    return tuple(t.target for t in available_actions(status))


def can_transition(current, target) -> bool:
    try:
        return _status(target) in allowed_targets(current)
    except ValueError:
        return False


def check_transition(current, target) -> Transition:
    """Return the table entry for current -> target or raise IllegalTransition."""
    try:
        cur, tgt = _status(current), _status(target)
    except ValueError:
        raise IllegalTransition(current, target) from None
    for t in TRANSITIONS[cur]:
        if t.target is tgt:
            return t
    raise IllegalTransition(cur, tgt)


def is_terminal(status) -> bool:
    return _status(status) in TERMINAL


def restocks(target) -> bool:
    return _status(target) is OrderStatus.CANCELLED


def payment_status_after(method, payment_status, current, target) -> PaymentStatus:
    """Payment status the UI should expect once the backend applies current -> target.

    Only a COD parcel handed over by the carrier (SHIPPING -> DELIVERED) is
    collected; resolving a dispute back to DELIVERED leaves payment alone.
    """
    method = PaymentMethod(str(getattr(method, "value", method)).upper())
    payment_status = PaymentStatus(str(getattr(payment_status, "value", payment_status)).upper())
    if (method is PaymentMethod.COD and _status(current) is OrderStatus.SHIPPING
            and _status(target) is OrderStatus.DELIVERED):
        return PaymentStatus.PAID
    return payment_status
