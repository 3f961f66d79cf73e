"""
Order API router

- POST /orders, /orders/multi: place an order (students for themselves, managers for anyone)
- GET  /orders, /orders/{order_id}: students see only their own orders
- POST /orders/{order_id}/{action}: approve | reject | cancel | mark_purchased | mark_ready | collect

Students may cancel their own orders; every other action needs a teacher or admin.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from sundaystore.core.auth_middleware import ensure_student_access, get_current_actor
from sundaystore.core.exceptions import AuthorizationError
from sundaystore.deps import get_order_service
from sundaystore.models.order import OrderStatus
from sundaystore.schemas.actor import Actor
from sundaystore.schemas.order import (
    MultiItemOrderCreateRequest,
    OrderActionRequest,
    OrderActionResponse,
    OrderCreateRequest,
    OrderListResponse,
    OrderResponse,
)
from sundaystore.schemas.pagination import PaginationLimits
from sundaystore.services.order_service import OrderService
from sundaystore.services.order_state_machine import OrderAction

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    request: OrderCreateRequest,
    actor: Actor = Depends(get_current_actor),
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Totals are frozen now; nothing is charged until mark_purchased"""
    ensure_student_access(actor, request.student_id)
    return order_service.create_order(request, actor_id=actor.id)


@router.post("/multi", response_model=OrderResponse, status_code=201)
def create_multi_item_order(
    request: MultiItemOrderCreateRequest,
    actor: Actor = Depends(get_current_actor),
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    ensure_student_access(actor, request.student_id)
    return order_service.create_multi_item_order(request, actor_id=actor.id)


@router.get("", response_model=OrderListResponse)
def list_orders(
    status: Optional[OrderStatus] = Query(None),
    student_id: Optional[int] = Query(None, gt=0),
    limit: int = Query(
        PaginationLimits.ORDERS["default"],
        ge=PaginationLimits.ORDERS["min"],
        le=PaginationLimits.ORDERS["max"],
    ),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    order_service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    if not actor.is_manager:
        student_id = actor.id
    return order_service.list_orders(
        status=status, student_id=student_id, limit=limit, offset=offset
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int = Path(..., gt=0),
    actor: Actor = Depends(get_current_actor),
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    order = order_service.get_order(order_id)
    ensure_student_access(actor, order.student_id)
    return order


@router.post("/{order_id}/{action}", response_model=OrderActionResponse)
def apply_order_action(
    order_id: int = Path(..., gt=0),
    action: OrderAction = Path(...),
    request: Optional[OrderActionRequest] = Body(None),
    actor: Actor = Depends(get_current_actor),
    order_service: OrderService = Depends(get_order_service),
) -> OrderActionResponse:
    """
    Apply one lifecycle action.

    HTTP Status:
        200: transition applied
        400: BALANCE_001 on mark_purchased when the wallet is short
        409: ORDER_001 action not valid for the current status,
             STOCK_001 on mark_purchased when an item ran out
    """
    if not actor.is_manager:
        if action != OrderAction.CANCEL:
            raise AuthorizationError("Teacher or admin role required")
        ensure_student_access(actor, order_service.get_order(order_id).student_id)

    admin_notes = request.admin_notes if request else None
    return order_service.apply_action(
        order_id, action, actor_id=actor.id, admin_notes=admin_notes
    )
