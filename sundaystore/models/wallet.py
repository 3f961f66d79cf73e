"""
Wallet ledger tables

``wallets`` holds the cached balance per student, ``wallet_transactions`` is the
append-only log the balance is derived from. A refund is a new offsetting entry,
never an edit of an existing one.
"""

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import UniqueConstraint

from sundaystore.models.base import BaseModel, BigIntegerPK, enum_values


class Currency(str, enum.Enum):
    POINTS = "points"
    CASH = "cash"


class TransactionReason(str, enum.Enum):
    ORDER_PURCHASE = "order_purchase"
    TEACHER_ADJUSTMENT = "teacher_adjustment"
    ATTENDANCE_AWARD = "attendance_award"
    TRIP_AWARD = "trip_award"
    ORDER_REFUND = "order_refund"


class Wallet(BaseModel):
    """One row per student. Balances are written only by the ledger primitives."""

    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, unique=True
    )
    points_balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    cash_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )


class WalletTransaction(BaseModel):
    """
    Immutable ledger entry

    - amount is signed: positive for credits, negative for debits
    - (student_id, reason, reference_id) is unique, which makes purchases,
      refunds and awards idempotent per reference
    - balance_after is the balance of ``currency`` right after this entry
    """

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "reason", "reference_id", name="uq_wallet_tx_reference"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("students.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[Currency] = mapped_column(
        Enum(Currency, native_enum=False, length=10, values_callable=enum_values),
        nullable=False,
    )
    reason: Mapped[TransactionReason] = mapped_column(
        Enum(
            TransactionReason,
            native_enum=False,
            length=32,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    reference_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    actor_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
