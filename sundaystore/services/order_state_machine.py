"""
Order lifecycle

    pending --approve--> approved --mark_purchased--> purchased --mark_ready--> ready --collect--> collected
       |                    |
       +--reject/cancel-----+--reject/cancel--> cancelled

``collected`` and ``cancelled`` are terminal. Any (status, action) pair missing
from TRANSITIONS is rejected with InvalidTransitionError.
"""

import enum
from typing import Dict, Tuple

from sundaystore.core.exceptions import InvalidTransitionError
from sundaystore.models.order import OrderStatus


class OrderAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    MARK_PURCHASED = "mark_purchased"
    MARK_READY = "mark_ready"
    COLLECT = "collect"


TRANSITIONS: Dict[Tuple[OrderStatus, OrderAction], OrderStatus] = {
    (OrderStatus.PENDING, OrderAction.APPROVE): OrderStatus.APPROVED,
    (OrderStatus.PENDING, OrderAction.REJECT): OrderStatus.CANCELLED,
    (OrderStatus.PENDING, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.APPROVED, OrderAction.MARK_PURCHASED): OrderStatus.PURCHASED,
    (OrderStatus.APPROVED, OrderAction.REJECT): OrderStatus.CANCELLED,
    (OrderStatus.APPROVED, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PURCHASED, OrderAction.MARK_READY): OrderStatus.READY,
    (OrderStatus.READY, OrderAction.COLLECT): OrderStatus.COLLECTED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.COLLECTED, OrderStatus.CANCELLED})


def next_status(order_id: int, current: OrderStatus, action: OrderAction) -> OrderStatus:
    """Target status for ``action`` or InvalidTransitionError"""
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransitionError(
            order_id=order_id, current_status=current.value, action=action.value
        )


def allowed_actions(current: OrderStatus) -> list:
    return [action for (status, action) in TRANSITIONS if status == current]
