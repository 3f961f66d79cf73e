import enum
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import BigInteger, Enum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sundaystore.models.base import BaseModel, BigIntegerPK, enum_values
from sundaystore.models.wallet import Currency


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PURCHASED = "purchased"
    READY = "ready"
    COLLECTED = "collected"
    CANCELLED = "cancelled"



class Order(BaseModel):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )
    # single-item orders only; multi-item orders keep their lines in order_items
    store_item_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("store_items.id"), nullable=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_method: Mapped[Currency] = mapped_column(
        Enum(Currency, native_enum=False, length=10, values_callable=enum_values),
        nullable=False,
    )
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cash: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        lazy="selectin",
    )


class OrderItem(BaseModel):
    """Order line with its price frozen at order time."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("orders.id"), nullable=False, index=True
    )
    store_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("store_items.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    order: Mapped[Order] = relationship("Order", back_populates="items")
