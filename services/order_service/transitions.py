"""
Forward-only transition tables, consulted when STRICT_ORDER_TRANSITIONS is on.

With strict mode off, any status other than the ignore sentinel is written as-is
(only Cancelled orders are frozen).
"""
from .models import OrderStatus, PaymentStatus

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.NOT_PROCESSED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def can_change_order_status(current: str, new: OrderStatus) -> bool:
    try:
        return new in ORDER_TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return False


def can_change_payment_status(current: str | None, new: PaymentStatus) -> bool:
    try:
        return new in PAYMENT_TRANSITIONS[PaymentStatus(current or PaymentStatus.PENDING.value)]
    except ValueError:
        return False
