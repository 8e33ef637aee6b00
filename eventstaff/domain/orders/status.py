"""
Order status transitions

Order statuses: Pending → Confirmed → Completed → Reviewed
Pending and Confirmed orders may also be Cancelled. Reviewed and Cancelled are terminal.
"""

import logging

from fastapi import HTTPException

from ...constants import OrderStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.REVIEWED}),
    OrderStatus.REVIEWED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Statuses in which the staff list may still change
ASSIGNABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def can_transition(current: str, target: OrderStatus) -> bool:
    try:
        current_status = OrderStatus(current)
    except ValueError:
        return False
    return target in ALLOWED_TRANSITIONS[current_status]


def validate_status_transition(order_id: str, current: str, target: OrderStatus) -> None:
    """Raise 409 when the order cannot move from its current status to target"""
    if not can_transition(current, target):
        logger.warning(f"⚠️ Order {order_id}: illegal transition {current} → {target.value}")
        raise HTTPException(
            status_code=409,
            detail=f"Cannot change order status from {current} to {target.value}",
        )
