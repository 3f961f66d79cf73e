import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Enum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from sundaystore.models.base import BaseModel, BigIntegerPK, enum_values


class StockMovementReason(str, enum.Enum):
    ORDER_PURCHASE = "order_purchase"
    ORDER_REFUND = "order_refund"
    RESTOCK = "restock"


class StoreItem(BaseModel):
    __tablename__ = "store_items"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_cash: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    # written only through the inventory primitives
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class StockMovement(BaseModel):
    """Audit row for every stock change; unique per (item, reason, order)."""

    __tablename__ = "stock_movements"
    __table_args__ = (
        UniqueConstraint(
            "store_item_id", "reason", "order_id", name="uq_stock_movement_order"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    store_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("store_items.id"), nullable=False, index=True
    )
    order_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("orders.id"), nullable=True
    )
    delta: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[StockMovementReason] = mapped_column(
        Enum(
            StockMovementReason,
            native_enum=False,
            length=32,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    actor_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    stock_after: Mapped[int] = mapped_column(Integer, nullable=False)
