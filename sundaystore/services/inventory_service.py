from typing import List, Optional

from sqlalchemy.orm import Session

from sundaystore.core.exceptions import NotFoundError, ValidationError
from sundaystore.repositories.inventory_repository import InventoryRepository
from sundaystore.schemas.store import (
    StockMovementEntry,
    StoreCatalogResponse,
    StoreItemCreateRequest,
    StoreItemResponse,
    StoreItemUpdateRequest,
)
import logging

logger = logging.getLogger(__name__)


class InventoryService:
    """Store catalog and stock counts"""

    def __init__(self, db: Session):
        self.db = db
        self.inventory_repo = InventoryRepository(db)

    def _require_item(self, item_id: int) -> StoreItemResponse:
        item = self.inventory_repo.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Store item not found: {item_id}")
        return item

    def get_item(self, item_id: int) -> StoreItemResponse:
        return self._require_item(item_id)

    def list_catalog(
        self, store_id: Optional[int] = None, active_only: bool = True
    ) -> StoreCatalogResponse:
        items = self.inventory_repo.list_items(store_id=store_id, active_only=active_only)
        return StoreCatalogResponse(items=items, total_count=len(items))

    def create_item(
        self, request: StoreItemCreateRequest, actor_id: Optional[int] = None
    ) -> StoreItemResponse:
        try:
            item = self.inventory_repo.create_item(
                store_id=request.store_id,
                name=request.name,
                description=request.description,
                price_points=request.price_points,
                price_cash=request.price_cash,
                stock_quantity=request.stock_quantity,
                requires_approval=request.requires_approval,
                is_active=request.is_active,
                actor_id=actor_id,
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Store item {item.id} created in store {item.store_id} with stock {item.stock_quantity}"
        )
        return item

    def update_item(
        self, item_id: int, request: StoreItemUpdateRequest
    ) -> StoreItemResponse:
        """Catalog fields only; stock moves through restock and orders"""
        current = self._require_item(item_id)
        values = request.model_dump(exclude_unset=True)

        price_points = values.get("price_points", current.price_points)
        price_cash = values.get("price_cash", current.price_cash)
        if price_points <= 0 and price_cash <= 0:
            raise ValidationError(
                "At least one of price_points or price_cash must be positive"
            )

        try:
            item = self.inventory_repo.update_item(item_id, values)
        except Exception:
            self.db.rollback()
            raise
        if item is None:
            raise NotFoundError(f"Store item not found: {item_id}")

        logger.info(f"Store item {item_id} updated: {sorted(values)}")
        return item

    def restock(
        self, item_id: int, quantity: int, actor_id: Optional[int] = None
    ) -> StoreItemResponse:
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self._require_item(item_id)

        try:
            item = self.inventory_repo.add_stock(item_id, quantity, actor_id=actor_id)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Restocked item {item_id} by {quantity} -> {item.stock_quantity}")
        return item

    def decrement_stock(
        self,
        item_id: int,
        quantity: int,
        order_id: int,
        actor_id: Optional[int] = None,
    ) -> StoreItemResponse:
        """Take ``quantity`` units for an order; applied once per order.

        Raises:
            InsufficientStockError: fewer than ``quantity`` units left; nothing changes
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")

        try:
            item, replayed = self.inventory_repo.decrement_stock(
                item_id, quantity, order_id=order_id, actor_id=actor_id
            )
        except Exception:
            self.db.rollback()
            raise

        if not replayed:
            logger.info(
                f"Stock for item {item_id} -{quantity} (order {order_id}) -> {item.stock_quantity}"
            )
        return item

    def restore_stock(
        self,
        item_id: int,
        quantity: int,
        order_id: int,
        actor_id: Optional[int] = None,
    ) -> StoreItemResponse:
        """Put back units taken for an order; applied once per order"""
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")

        try:
            item, replayed = self.inventory_repo.restore_stock(
                item_id, quantity, order_id=order_id, actor_id=actor_id
            )
        except Exception:
            self.db.rollback()
            raise

        if not replayed:
            logger.info(
                f"Stock for item {item_id} +{quantity} (order {order_id} refund) -> {item.stock_quantity}"
            )
        return item

    def list_movements(self, item_id: int, limit: int = 100) -> List[StockMovementEntry]:
        self._require_item(item_id)
        return self.inventory_repo.list_movements(item_id, limit=min(limit, 100))
