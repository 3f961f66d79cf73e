from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from sundaystore.models.order import (
    Order as OrderModel,
    OrderItem as OrderItemModel,
    OrderStatus,
)
from sundaystore.models.wallet import Currency
from sundaystore.repositories.base import BaseRepository
from sundaystore.schemas.order import OrderResponse


class OrderRepository(BaseRepository[OrderModel, OrderResponse]):
    """Orders and their frozen lines"""

    def __init__(self, db: Session):
        super().__init__(OrderModel, OrderResponse, db)

    def get_order(self, order_id: int) -> Optional[OrderResponse]:
        order = self._query().filter(OrderModel.id == order_id).first()
        return self._to_schema(order)

    def get_status(self, order_id: int) -> Optional[OrderStatus]:
        return (
            self.db.query(OrderModel.status)
            .filter(OrderModel.id == order_id)
            .scalar()
        )

    def create_order(
        self,
        student_id: int,
        payment_method: Currency,
        lines: List[Dict[str, Any]],
        total_points: int,
        total_cash: Decimal,
        notes: Optional[str] = None,
        commit: bool = True,
    ) -> OrderResponse:
        """
        Insert an order in ``pending`` with one OrderItem per line.

        Each line carries store_item_id, quantity, unit_price and total_price,
        already computed by the caller. Single-line orders also get
        ``store_item_id`` on the order row itself.
        """
        single = lines[0] if len(lines) == 1 else None
        order = OrderModel(
            student_id=student_id,
            store_item_id=single["store_item_id"] if single else None,
            quantity=sum(line["quantity"] for line in lines),
            payment_method=payment_method,
            total_points=total_points,
            total_cash=total_cash,
            status=OrderStatus.PENDING,
            notes=notes,
        )
        self.db.add(order)
        self.db.flush()

        for line in lines:
            self.db.add(
                OrderItemModel(
                    order_id=order.id,
                    store_item_id=line["store_item_id"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    total_price=line["total_price"],
                )
            )
        self.db.flush()

        self._finish(commit)
        return self.get_order(order.id)

    def transition_status(
        self,
        order_id: int,
        from_status: OrderStatus,
        to_status: OrderStatus,
        actor_id: Optional[int] = None,
        admin_notes: Optional[str] = None,
        commit: bool = True,
    ) -> bool:
        """
        Status-guarded update: ``... WHERE id = :id AND status = :from_status``.

        Returns False when the order is no longer in ``from_status`` - exactly
        one of several concurrent callers sees True.
        """
        values = {OrderModel.status: to_status, OrderModel.updated_by: actor_id}
        if admin_notes is not None:
            values[OrderModel.admin_notes] = admin_notes

        updated_count = (
            self.db.query(OrderModel)
            .filter(OrderModel.id == order_id, OrderModel.status == from_status)
            .update(values, synchronize_session=False)
        )
        if updated_count == 0:
            return False

        self._finish(commit)
        return True

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        student_id: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[OrderResponse]:
        """Newest first"""
        query = self._query()
        if status is not None:
            query = query.filter(OrderModel.status == status)
        if student_id is not None:
            query = query.filter(OrderModel.student_id == student_id)

        orders = query.order_by(desc(OrderModel.id)).limit(limit).offset(offset).all()
        return [self._to_schema(order) for order in orders]

    def count_orders(
        self, status: Optional[OrderStatus] = None, student_id: Optional[int] = None
    ) -> int:
        filters: Dict[str, Any] = {}
        if status is not None:
            filters["status"] = status
        if student_id is not None:
            filters["student_id"] = student_id
        return self.count(filters)
