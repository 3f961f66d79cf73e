from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from sundaystore.config import Settings, settings as default_settings
from sundaystore.core.exceptions import (
    InsufficientFundsError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ReferenceConflictError,
    ValidationError,
)
from sundaystore.models.order import OrderStatus
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.repositories.inventory_repository import InventoryRepository
from sundaystore.repositories.order_repository import OrderRepository
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.repositories.wallet_repository import WalletRepository
from sundaystore.schemas.order import (
    MultiItemOrderCreateRequest,
    OrderActionResponse,
    OrderCreateRequest,
    OrderLineRequest,
    OrderListResponse,
    OrderResponse,
)
from sundaystore.schemas.store import StoreItemResponse
from sundaystore.services.order_state_machine import OrderAction, next_status
import logging

logger = logging.getLogger(__name__)


class OrderService:
    """Order creation and lifecycle transitions

    Only ``mark_purchased`` touches the wallet and stock. It applies the status
    change, the debit and every stock decrement in one database transaction.
    """

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.order_repo = OrderRepository(db)
        self.wallet_repo = WalletRepository(db)
        self.inventory_repo = InventoryRepository(db)
        self.student_repo = StudentRepository(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> OrderResponse:
        order = self.order_repo.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order not found: {order_id}")
        return order

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        student_id: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> OrderListResponse:
        limit = min(limit, 100)
        orders = self.order_repo.list_orders(
            status=status, student_id=student_id, limit=limit, offset=offset
        )
        total_count = self.order_repo.count_orders(status=status, student_id=student_id)
        return OrderListResponse(
            orders=orders,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @staticmethod
    def _unit_price(item: StoreItemResponse, payment_method: Currency) -> Decimal:
        if not item.is_active:
            raise ValidationError(
                f"Store item {item.id} is not available for ordering",
                details={"store_item_id": item.id},
            )

        if payment_method == Currency.POINTS:
            price = Decimal(item.price_points or 0)
        else:
            price = Decimal(item.price_cash or 0).quantize(Decimal("0.01"))

        if price <= 0:
            raise ValidationError(
                f"Store item {item.id} cannot be paid with {payment_method.value}",
                details={"store_item_id": item.id, "payment_method": payment_method.value},
            )
        return price

    def _create(
        self,
        student_id: int,
        lines: List[OrderLineRequest],
        payment_method: Currency,
        notes: Optional[str],
        actor_id: Optional[int],
    ) -> OrderResponse:
        if not self.student_repo.get_student(student_id):
            raise NotFoundError(f"Student not found: {student_id}")

        # one line per item; the stock movement for an order is keyed by item
        quantities: Dict[int, int] = {}
        for line in lines:
            if line.quantity <= 0:
                raise ValidationError("Quantity must be positive")
            quantities[line.store_item_id] = (
                quantities.get(line.store_item_id, 0) + line.quantity
            )

        items = self.inventory_repo.get_items(list(quantities))
        missing = [item_id for item_id in quantities if item_id not in items]
        if missing:
            raise NotFoundError(
                f"Store item not found: {missing[0]}", details={"store_item_ids": missing}
            )

        order_lines = []
        for item_id, quantity in quantities.items():
            unit_price = self._unit_price(items[item_id], payment_method)
            order_lines.append(
                {
                    "store_item_id": item_id,
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "total_price": unit_price * quantity,
                }
            )

        total = sum((line["total_price"] for line in order_lines), Decimal("0"))
        if payment_method == Currency.POINTS:
            total_points, total_cash = int(total), Decimal("0")
        else:
            total_points, total_cash = 0, total

        needs_approval = any(items[item_id].requires_approval for item_id in quantities)

        try:
            order = self.order_repo.create_order(
                student_id=student_id,
                payment_method=payment_method,
                lines=order_lines,
                total_points=total_points,
                total_cash=total_cash,
                notes=notes,
                commit=False,
            )
            if not needs_approval:
                self.order_repo.transition_status(
                    order.id,
                    OrderStatus.PENDING,
                    next_status(order.id, OrderStatus.PENDING, OrderAction.APPROVE),
                    actor_id=actor_id,
                    commit=False,
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Order {order.id} created for student {student_id}: "
            f"{total_points} points / {total_cash} cash"
            + ("" if needs_approval else " (auto-approved)")
        )
        return self.get_order(order.id)

    def create_order(
        self, request: OrderCreateRequest, actor_id: Optional[int] = None
    ) -> OrderResponse:
        """Single-item order. Totals are frozen at the current item price.

        Items that do not require approval go straight to ``approved``; nothing
        is debited until ``mark_purchased``.
        """
        line = OrderLineRequest(
            store_item_id=request.store_item_id, quantity=request.quantity
        )
        return self._create(
            request.student_id, [line], request.payment_method, request.notes, actor_id
        )

    def create_multi_item_order(
        self, request: MultiItemOrderCreateRequest, actor_id: Optional[int] = None
    ) -> OrderResponse:
        """Item-list order; auto-approved only when no line requires approval"""
        return self._create(
            request.student_id,
            request.items,
            request.payment_method,
            request.notes,
            actor_id,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _lost_race(self, order_id: int, action: OrderAction) -> InvalidTransitionError:
        """Status moved between our read and the guarded update"""
        current = self.order_repo.get_status(order_id)
        return InvalidTransitionError(
            order_id=order_id,
            current_status=current.value if current else "unknown",
            action=action.value,
        )

    def _transition(
        self,
        order_id: int,
        action: OrderAction,
        actor_id: Optional[int],
        admin_notes: Optional[str],
    ) -> OrderActionResponse:
        order = self.get_order(order_id)
        try:
            target = next_status(order_id, order.status, action)
        except InvalidTransitionError:
            logger.warning(
                f"Rejected {action.value} on order {order_id} in status {order.status.value}"
            )
            raise

        try:
            changed = self.order_repo.transition_status(
                order_id,
                order.status,
                target,
                actor_id=actor_id,
                admin_notes=admin_notes,
                commit=False,
            )
            if not changed:
                raise self._lost_race(order_id, action)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Order {order_id} {order.status.value} -> {target.value} ({action.value} by {actor_id})"
        )
        return OrderActionResponse(order=self.get_order(order_id))

    def approve(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        return self._transition(order_id, OrderAction.APPROVE, actor_id, admin_notes)

    def reject(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        return self._transition(order_id, OrderAction.REJECT, actor_id, admin_notes)

    def cancel(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        return self._transition(order_id, OrderAction.CANCEL, actor_id, admin_notes)

    def mark_ready(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        return self._transition(order_id, OrderAction.MARK_READY, actor_id, admin_notes)

    def collect(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        return self._transition(order_id, OrderAction.COLLECT, actor_id, admin_notes)

    def mark_purchased(
        self, order_id: int, actor_id: Optional[int] = None, admin_notes: Optional[str] = None
    ) -> OrderActionResponse:
        """approved -> purchased, debiting the wallet and taking the stock.

        Order row, wallet row, then item rows by ascending id. Any failure rolls
        back the whole unit and the order stays ``approved``.

        Raises:
            InvalidTransitionError: order not ``approved`` (including a retried call)
            InsufficientFundsError: wallet cannot cover the frozen total
            InsufficientStockError: an item ran out since the order was placed
            ReferenceConflictError: a purchase entry for this order exists with
                another amount or currency
        """
        action = OrderAction.MARK_PURCHASED
        order = self.get_order(order_id)
        try:
            target = next_status(order_id, order.status, action)
        except InvalidTransitionError:
            logger.warning(
                f"Rejected {action.value} on order {order_id} in status {order.status.value}"
            )
            raise

        currency = order.payment_method
        amount = order.total_points if currency == Currency.POINTS else order.total_cash

        try:
            changed = self.order_repo.transition_status(
                order_id,
                order.status,
                target,
                actor_id=actor_id,
                admin_notes=admin_notes,
                commit=False,
            )
            if not changed:
                raise self._lost_race(order_id, action)

            entry, replayed = self.wallet_repo.apply_transaction(
                student_id=order.student_id,
                currency=currency,
                delta=-amount,
                reason=TransactionReason.ORDER_PURCHASE,
                reference_id=str(order_id),
                actor_id=actor_id,
                note=f"Order #{order_id}",
                commit=False,
            )
            if replayed:
                logger.warning(
                    f"Order {order_id} purchase debit already recorded (tx {entry.id})"
                )

            for line in sorted(order.items, key=lambda line: line.store_item_id):
                self.inventory_repo.decrement_stock(
                    line.store_item_id,
                    line.quantity,
                    order_id=order_id,
                    actor_id=actor_id,
                    commit=False,
                )

            self.db.commit()
        except (InsufficientFundsError, InsufficientStockError, ReferenceConflictError) as e:
            self.db.rollback()
            logger.warning(f"Purchase of order {order_id} failed, order stays approved: {e.message}")
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Order {order_id} purchased: {amount} {currency.value} debited from student "
            f"{order.student_id} (tx {entry.id})"
        )
        return OrderActionResponse(
            order=self.get_order(order_id),
            transaction_id=entry.id,
            wallet=self.wallet_repo.get_wallet(order.student_id),
        )

    def apply_action(
        self,
        order_id: int,
        action: OrderAction,
        actor_id: Optional[int] = None,
        admin_notes: Optional[str] = None,
    ) -> OrderActionResponse:
        """Dispatch by action name (used by the HTTP layer)"""
        handlers = {
            OrderAction.APPROVE: self.approve,
            OrderAction.REJECT: self.reject,
            OrderAction.CANCEL: self.cancel,
            OrderAction.MARK_PURCHASED: self.mark_purchased,
            OrderAction.MARK_READY: self.mark_ready,
            OrderAction.COLLECT: self.collect,
        }
        return handlers[action](order_id, actor_id=actor_id, admin_notes=admin_notes)
