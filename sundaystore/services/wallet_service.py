from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from sqlalchemy.orm import Session

from sundaystore.config import Settings, settings as default_settings
from sundaystore.core.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    ReferenceConflictError,
    ValidationError,
)
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.repositories.wallet_repository import WalletRepository
from sundaystore.schemas.wallet import (
    WalletIntegrityCheckResponse,
    WalletLedgerResponse,
    WalletResponse,
    WalletTransactionResponse,
)
import logging

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def normalize_amount(currency: Currency, amount: Union[int, Decimal, str]) -> Union[int, Decimal]:
    """Positive whole points, or a positive cash amount with at most two decimals"""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {amount}")

    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be positive", details={"amount": str(amount)})

    if currency == Currency.POINTS:
        if value != value.to_integral_value():
            raise ValidationError(
                "Points amounts must be whole numbers", details={"amount": str(amount)}
            )
        return int(value)

    if value != value.quantize(CENT):
        raise ValidationError(
            "Cash amounts allow at most two decimal places",
            details={"amount": str(amount)},
        )
    return value.quantize(CENT)


class WalletService:
    """Wallet ledger: balances, credits, debits and the audit log"""

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.wallet_repo = WalletRepository(db)
        self.student_repo = StudentRepository(db)

    def _require_student(self, student_id: int) -> None:
        if not self.student_repo.get_student(student_id):
            raise NotFoundError(f"Student not found: {student_id}")

    def get_wallet(self, student_id: int) -> WalletResponse:
        """Wallet snapshot; a student without a wallet reads as zero balances"""
        self._require_student(student_id)
        wallet = self.wallet_repo.get_wallet(student_id)
        if wallet is None:
            return WalletResponse(
                student_id=student_id, points_balance=0, cash_balance=Decimal("0")
            )
        return wallet

    def get_balance(self, student_id: int, currency: Currency) -> Union[int, Decimal]:
        self._require_student(student_id)
        return self.wallet_repo.get_balance(student_id, currency)

    def credit(
        self,
        student_id: int,
        currency: Currency,
        amount: Union[int, Decimal],
        reason: TransactionReason,
        reference_id: Optional[str] = None,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> WalletTransactionResponse:
        """Increase a balance. Cannot fail on funds."""
        value = normalize_amount(currency, amount)
        return self._apply(
            student_id, currency, value, reason, reference_id, actor_id, note
        )

    def debit(
        self,
        student_id: int,
        currency: Currency,
        amount: Union[int, Decimal],
        reason: TransactionReason,
        reference_id: Optional[str] = None,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> WalletTransactionResponse:
        """Decrease a balance.

        Raises:
            InsufficientFundsError: balance lower than ``amount``; nothing is written
        """
        value = normalize_amount(currency, amount)
        return self._apply(
            student_id, currency, -value, reason, reference_id, actor_id, note
        )

    def _apply(
        self,
        student_id: int,
        currency: Currency,
        delta: Union[int, Decimal],
        reason: TransactionReason,
        reference_id: Optional[str],
        actor_id: Optional[int],
        note: Optional[str],
    ) -> WalletTransactionResponse:
        self._require_student(student_id)

        try:
            entry, replayed = self.wallet_repo.apply_transaction(
                student_id=student_id,
                currency=currency,
                delta=delta,
                reason=reason,
                reference_id=reference_id,
                actor_id=actor_id,
                note=note,
                commit=True,
            )
        except (InsufficientFundsError, ReferenceConflictError) as e:
            self.db.rollback()
            logger.warning(f"Ledger {reason.value} rejected for student {student_id}: {e.message}")
            raise
        except Exception:
            self.db.rollback()
            raise

        if replayed:
            logger.info(
                f"Ledger replay for student {student_id}: {reason.value} {reference_id} already applied (tx {entry.id})"
            )
        else:
            logger.info(
                f"Ledger {reason.value} for student {student_id}: {delta} {currency.value} -> balance {entry.balance_after} (tx {entry.id})"
            )

        return WalletTransactionResponse(
            transaction=entry,
            wallet=self.get_wallet(student_id),
            replayed=replayed,
        )

    def list_transactions(
        self, student_id: int, limit: int = 50, offset: int = 0
    ) -> WalletLedgerResponse:
        """Paged ledger, newest first

        Args:
            limit: page size (capped at LEDGER_PAGE_MAX)
            offset: rows to skip
        """
        limit = min(limit, self.settings.LEDGER_PAGE_MAX)
        wallet = self.get_wallet(student_id)

        total_count = self.wallet_repo.count_transactions(student_id)
        entries = self.wallet_repo.list_transactions(
            student_id=student_id, limit=limit, offset=offset
        )
        return WalletLedgerResponse(
            wallet=wallet,
            entries=entries,
            total_count=total_count,
            has_next=offset + limit < total_count,
        )

    def verify_integrity(self, student_id: int) -> WalletIntegrityCheckResponse:
        """
        Recompute balances from the log and compare with the cached wallet.

        MISMATCH means something wrote a balance outside the ledger primitives.
        """
        wallet = self.get_wallet(student_id)
        sums = self.wallet_repo.sum_transactions(student_id)

        calculated_points = sums[Currency.POINTS].quantize(CENT)
        calculated_cash = sums[Currency.CASH].quantize(CENT)
        recorded_points = Decimal(wallet.points_balance).quantize(CENT)
        recorded_cash = Decimal(wallet.cash_balance).quantize(CENT)

        ok = calculated_points == recorded_points and calculated_cash == recorded_cash
        if not ok:
            logger.error(
                f"Wallet integrity MISMATCH for student {student_id}: "
                f"points {recorded_points} vs ledger {calculated_points}, "
                f"cash {recorded_cash} vs ledger {calculated_cash}"
            )

        return WalletIntegrityCheckResponse(
            status="OK" if ok else "MISMATCH",
            student_id=student_id,
            calculated_points=calculated_points,
            recorded_points=recorded_points,
            calculated_cash=calculated_cash,
            recorded_cash=recorded_cash,
            entry_count=self.wallet_repo.count_transactions(student_id),
            verified_at=datetime.now(timezone.utc),
        )
