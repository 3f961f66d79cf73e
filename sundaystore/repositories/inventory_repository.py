from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sundaystore.core.exceptions import InsufficientStockError, NotFoundError
from sundaystore.models.store import (
    StockMovement as StockMovementModel,
    StockMovementReason,
    StoreItem as StoreItemModel,
)
from sundaystore.repositories.base import BaseRepository
from sundaystore.schemas.store import StockMovementEntry, StoreItemResponse

# columns the catalog editor may change; stock is deliberately absent
EDITABLE_ITEM_FIELDS = (
    "name",
    "description",
    "price_points",
    "price_cash",
    "requires_approval",
    "is_active",
)


class InventoryRepository(BaseRepository[StoreItemModel, StoreItemResponse]):
    """Store items and their stock counts"""

    def __init__(self, db: Session):
        super().__init__(StoreItemModel, StoreItemResponse, db)

    def _to_item_response(self, model_instance: StoreItemModel) -> Optional[StoreItemResponse]:
        """StoreItem model -> StoreItemResponse (adds is_available)"""
        if model_instance is None:
            return None

        stock = getattr(model_instance, "stock_quantity", 0)
        data = {
            "id": model_instance.id,
            "store_id": model_instance.store_id,
            "name": model_instance.name,
            "description": model_instance.description,
            "price_points": model_instance.price_points or 0,
            "price_cash": model_instance.price_cash or Decimal("0"),
            "stock_quantity": stock,
            "requires_approval": model_instance.requires_approval,
            "is_active": model_instance.is_active,
            "is_available": bool(model_instance.is_active) and stock > 0,
            "created_at": model_instance.created_at,
            "updated_at": model_instance.updated_at,
        }
        return StoreItemResponse(**data)

    def _to_movement(self, model_instance: StockMovementModel) -> StockMovementEntry:
        return StockMovementEntry.model_validate(model_instance)

    def get_item(self, item_id: int) -> Optional[StoreItemResponse]:
        item = self._query().filter(StoreItemModel.id == item_id).first()
        return self._to_item_response(item)

    def get_items(self, item_ids: List[int]) -> Dict[int, StoreItemResponse]:
        items = self._query().filter(StoreItemModel.id.in_(item_ids)).all()
        return {item.id: self._to_item_response(item) for item in items}

    def list_items(
        self, store_id: Optional[int] = None, active_only: bool = False
    ) -> List[StoreItemResponse]:
        query = self._query()
        if store_id is not None:
            query = query.filter(StoreItemModel.store_id == store_id)
        if active_only:
            query = query.filter(StoreItemModel.is_active.is_(True))

        items = query.order_by(asc(StoreItemModel.name), asc(StoreItemModel.id)).all()
        return [self._to_item_response(item) for item in items]

    def create_item(
        self,
        store_id: int,
        name: str,
        price_points: int,
        price_cash: Decimal,
        stock_quantity: int,
        requires_approval: bool,
        is_active: bool,
        description: Optional[str] = None,
        actor_id: Optional[int] = None,
        commit: bool = True,
    ) -> StoreItemResponse:
        """New catalog entry; the opening stock is recorded as a restock movement"""
        item = StoreItemModel(
            store_id=store_id,
            name=name,
            description=description,
            price_points=price_points,
            price_cash=price_cash,
            stock_quantity=0,
            requires_approval=requires_approval,
            is_active=is_active,
        )
        self.db.add(item)
        self.db.flush()

        if stock_quantity > 0:
            self.add_stock(item.id, stock_quantity, actor_id=actor_id, commit=False)

        self._finish(commit)
        return self.get_item(item.id)

    def update_item(
        self, item_id: int, values: Dict[str, Any], commit: bool = True
    ) -> Optional[StoreItemResponse]:
        """Catalog fields only"""
        changes = {
            getattr(StoreItemModel, key): value
            for key, value in values.items()
            if key in EDITABLE_ITEM_FIELDS
        }
        if changes:
            updated_count = (
                self.db.query(StoreItemModel)
                .filter(StoreItemModel.id == item_id)
                .update(changes, synchronize_session=False)
            )
            if updated_count == 0:
                return None
            self._finish(commit)

        return self.get_item(item_id)

    def find_movement(
        self, item_id: int, reason: StockMovementReason, order_id: int
    ) -> Optional[StockMovementEntry]:
        movement = (
            self.db.query(StockMovementModel)
            .filter(
                StockMovementModel.store_item_id == item_id,
                StockMovementModel.reason == reason,
                StockMovementModel.order_id == order_id,
            )
            .first()
        )
        return self._to_movement(movement) if movement else None

    def _current_stock(self, item_id: int) -> Optional[int]:
        return (
            self.db.query(StoreItemModel.stock_quantity)
            .filter(StoreItemModel.id == item_id)
            .scalar()
        )

    def _move_stock(
        self,
        item_id: int,
        delta: int,
        reason: StockMovementReason,
        order_id: Optional[int],
        actor_id: Optional[int],
        commit: bool,
    ) -> Tuple[StoreItemResponse, bool]:
        """
        Change stock by ``delta`` and record the movement atomically.

        Decrements carry ``stock_quantity >= quantity`` in the WHERE clause, so
        concurrent orders can never drive stock below zero. Movements tied to an
        order are applied at most once per (item, reason, order).

        Returns:
            (item, replayed)
        """
        if order_id is not None and self.find_movement(item_id, reason, order_id):
            return self.get_item(item_id), True

        try:
            with self.db.begin_nested():
                query = self.db.query(StoreItemModel).filter(StoreItemModel.id == item_id)
                if delta < 0:
                    query = query.filter(StoreItemModel.stock_quantity >= -delta)

                updated_count = query.update(
                    {StoreItemModel.stock_quantity: StoreItemModel.stock_quantity + delta},
                    synchronize_session=False,
                )
                if updated_count == 0:
                    available = self._current_stock(item_id)
                    if available is None:
                        raise NotFoundError(f"Store item not found: {item_id}")
                    raise InsufficientStockError(
                        store_item_id=item_id, requested=-delta, available=available
                    )

                self.db.add(
                    StockMovementModel(
                        store_item_id=item_id,
                        order_id=order_id,
                        delta=delta,
                        reason=reason,
                        actor_id=actor_id,
                        stock_after=self._current_stock(item_id),
                    )
                )
                self.db.flush()
        except IntegrityError:
            if order_id is None or not self.find_movement(item_id, reason, order_id):
                raise
            return self.get_item(item_id), True

        self._finish(commit)
        return self.get_item(item_id), False

    def decrement_stock(
        self,
        item_id: int,
        quantity: int,
        order_id: int,
        actor_id: Optional[int] = None,
        commit: bool = True,
    ) -> Tuple[StoreItemResponse, bool]:
        return self._move_stock(
            item_id, -quantity, StockMovementReason.ORDER_PURCHASE, order_id, actor_id, commit
        )

    def restore_stock(
        self,
        item_id: int,
        quantity: int,
        order_id: int,
        actor_id: Optional[int] = None,
        commit: bool = True,
    ) -> Tuple[StoreItemResponse, bool]:
        return self._move_stock(
            item_id, quantity, StockMovementReason.ORDER_REFUND, order_id, actor_id, commit
        )

    def add_stock(
        self,
        item_id: int,
        quantity: int,
        actor_id: Optional[int] = None,
        commit: bool = True,
    ) -> StoreItemResponse:
        item, _ = self._move_stock(
            item_id, quantity, StockMovementReason.RESTOCK, None, actor_id, commit
        )
        return item

    def list_movements(self, item_id: int, limit: int = 100) -> List[StockMovementEntry]:
        movements = (
            self.db.query(StockMovementModel)
            .filter(StockMovementModel.store_item_id == item_id)
            .order_by(desc(StockMovementModel.id))
            .limit(limit)
            .all()
        )
        return [self._to_movement(movement) for movement in movements]
